"""
n-way ANOVA design object.

Wraps the validated response vector and grouping matrix. Grouping labels
are kept as given (any orderable type); relabeling to dense integer codes
happens later in the pipeline.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from string import ascii_uppercase
from typing import Any

import numpy as np
from numpy.typing import NDArray

from statbox.core.validation import (
    check_array,
    check_finite,
    check_vector,
    check_consistent_length,
    check_min_samples,
)
from statbox.core.exceptions import DimensionError, ValidationError


@dataclass(frozen=True)
class AnovanDesign:
    """
    Validated data container for n-way ANOVA.

    Created via for_nway(), not directly.
    """
    y: NDArray[np.floating[Any]]
    groups: NDArray              # (n, n_factors), raw labels
    factor_names: tuple[str, ...]
    n: int

    @property
    def n_factors(self) -> int:
        return self.groups.shape[1]

    @staticmethod
    def for_nway(
        y: Any,
        groups: Any,
        *,
        names: Any = None,
    ) -> 'AnovanDesign':
        """
        Create design for n-way ANOVA.

        Args:
            y: Response variable (numeric vector)
            groups: Either an (n, w) matrix of group labels, a 1D array of
                labels for a single factor, or a mapping {name: 1D labels}.
                Labels need not be sequential integers.
            names: Optional factor names; defaults to A, B, C, ... or to
                the mapping keys.

        Returns:
            AnovanDesign
        """
        y_arr = check_vector(check_array(y, "y"), "y")
        check_finite(y_arr, "y")
        check_min_samples(y_arr, 2, "y")

        if isinstance(groups, Mapping):
            if names is None:
                names = [str(k) for k in groups.keys()]
            columns = [np.asarray(col) for col in groups.values()]
            for name, col in zip(names, columns):
                if col.ndim != 1:
                    raise DimensionError(
                        f"{name}: expected 1D labels, got {col.ndim}D"
                    )
            if not columns:
                raise ValidationError("groups: at least one factor is required")
            lengths = {len(col) for col in columns}
            if len(lengths) > 1:
                raise DimensionError(
                    f"groups: factors have different lengths {sorted(lengths)}"
                )
            grp_arr = np.empty((len(columns[0]), len(columns)), dtype=object)
            for j, col in enumerate(columns):
                grp_arr[:, j] = col
        else:
            grp_arr = np.asarray(groups)
            if grp_arr.ndim == 1:
                grp_arr = grp_arr.reshape(-1, 1)
            if grp_arr.ndim != 2:
                raise DimensionError(
                    f"groups: expected a matrix with one row per observation, "
                    f"got {grp_arr.ndim}D with shape {grp_arr.shape}"
                )

        check_consistent_length(y_arr, grp_arr, names=("y", "groups"))

        n_factors = grp_arr.shape[1]
        if n_factors == 0:
            raise ValidationError("groups: at least one factor is required")

        if grp_arr.dtype.kind == 'f' and not np.all(np.isfinite(grp_arr)):
            raise ValidationError("groups: labels must not be NaN or Inf")

        factor_names = _factor_names(names, n_factors)

        return AnovanDesign(
            y=y_arr.astype(np.float64, copy=False),
            groups=grp_arr,
            factor_names=factor_names,
            n=len(y_arr),
        )


def _factor_names(names: Any, n_factors: int) -> tuple[str, ...]:
    """Resolve factor names, defaulting to letters by position."""
    if names is None:
        if n_factors > len(ascii_uppercase):
            raise ValidationError(
                f"names: {n_factors} factors exceed the {len(ascii_uppercase)} "
                f"default letter labels; pass names= explicitly"
            )
        return tuple(ascii_uppercase[:n_factors])

    if isinstance(names, str):
        names = [names]
    resolved = tuple(str(n) for n in names)
    if len(resolved) != n_factors:
        raise ValidationError(
            f"names: expected {n_factors} names, got {len(resolved)}"
        )
    if len(set(resolved)) != len(resolved):
        raise ValidationError(f"names: duplicate factor names in {resolved}")
    return resolved
