"""
Group relabeling for n-way ANOVA.

Maps arbitrary group labels (strings, non-sequential integers, ...) to
dense integer codes 1..G per factor. Code 0 is reserved: in the cell
table it means "summed over this factor".

Two label spaces are supported:
    'factor': every factor owns its own sorted label -> code map (default)
    'shared': all factors share one sorted label universe, so every factor
              is sized by the total number of distinct labels. Only correct
              when factors use disjoint or parallel label ranges.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from statbox.core.exceptions import ValidationError

LABEL_SPACES = ('factor', 'shared')


@dataclass(frozen=True)
class GroupCoding:
    """Relabeled grouping matrix and the maps back to the original labels."""
    codes: NDArray[np.int64]          # (n, w), entries in 1..n_levels[j]
    level_maps: tuple[NDArray, ...]   # level_maps[j][code - 1] -> raw label
    n_levels: tuple[int, ...]
    label_space: str

    @property
    def n_factors(self) -> int:
        return self.codes.shape[1]

    def decode(self, factor: int, code: int):
        """Original label for a 1-based code of one factor."""
        return self.level_maps[factor][code - 1]


def _unique_labels(labels: NDArray, name: str) -> tuple[NDArray, NDArray]:
    """Sorted distinct labels and 0-based inverse codes."""
    try:
        levels, inverse = np.unique(labels, return_inverse=True)
    except TypeError as e:
        raise ValidationError(
            f"{name}: labels must be mutually orderable: {e}"
        ) from e
    return levels, inverse.reshape(-1)


def relabel_groups(
    groups: NDArray,
    *,
    label_space: str = 'factor',
    names: tuple[str, ...] | None = None,
) -> GroupCoding:
    """
    Relabel a grouping matrix to dense 1-based integer codes.

    Labels are sorted ascending before codes are assigned, so the mapping
    depends only on the set of labels, never on row order.

    Args:
        groups: (n, w) matrix of raw labels
        label_space: 'factor' (one map per factor) or 'shared'
        names: Factor names for error messages

    Returns:
        GroupCoding

    Raises:
        ValidationError: unknown label space, unorderable labels, or a
            factor with fewer than 2 distinct labels
    """
    if label_space not in LABEL_SPACES:
        raise ValidationError(
            f"label_space must be one of {LABEL_SPACES}, got {label_space!r}"
        )

    n, w = groups.shape
    if names is None:
        names = tuple(f"factor {j + 1}" for j in range(w))

    for j in range(w):
        n_distinct = len(_unique_labels(groups[:, j], names[j])[0])
        if n_distinct < 2:
            raise ValidationError(
                f"{names[j]}: need at least 2 levels, got {n_distinct}"
            )

    codes = np.empty((n, w), dtype=np.int64)

    if label_space == 'factor':
        level_maps = []
        for j in range(w):
            levels, inverse = _unique_labels(groups[:, j], names[j])
            codes[:, j] = inverse + 1
            level_maps.append(levels)
        return GroupCoding(
            codes=codes,
            level_maps=tuple(level_maps),
            n_levels=tuple(len(m) for m in level_maps),
            label_space=label_space,
        )

    # Flatten column by column so inverse codes reshape back in place
    levels, inverse = _unique_labels(groups.ravel(order='F'), "groups")
    codes[:, :] = inverse.reshape((n, w), order='F') + 1
    return GroupCoding(
        codes=codes,
        level_maps=(levels,) * w,
        n_levels=(len(levels),) * w,
        label_space=label_space,
    )
