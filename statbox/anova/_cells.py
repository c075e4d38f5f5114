"""
Cell aggregation for n-way ANOVA.

One pass over the observations accumulates count, sum and sum of squares
into the fully-specified cell of each observation. Marginal cells (code 0
in the summed-over factor positions) are filled lazily, once per factor
selection, the first time an effect calculation asks for them.

The three flat arrays are viewed as (G_1 + 1) x ... x (G_w + 1) arrays in
Fortran order, so factor 0 is the least significant mixed-radix digit.
"""

from dataclasses import dataclass, field
from numbers import Integral

import numpy as np
from numpy.typing import NDArray

from statbox.core.exceptions import CapacityError, ValidationError
from statbox.anova._interactions import InteractionTable

DEFAULT_MAX_CELLS = 2 ** 24

Selection = tuple[bool, ...]
CellSums = tuple[NDArray[np.int64], NDArray[np.float64], NDArray[np.float64]]


@dataclass
class CellTable:
    """
    Flat count / sum / sum-of-squares tables for one ANOVA call.

    Cells are only ever incremented. The cache of materialized selections
    lives on the instance, so it is discarded with the table.
    """
    counts: NDArray[np.int64]
    sums: NDArray[np.float64]
    sumsq: NDArray[np.float64]
    n_levels: tuple[int, ...]
    _materialized: dict[Selection, CellSums] = field(
        default_factory=dict, repr=False,
    )

    @property
    def n_factors(self) -> int:
        return len(self.n_levels)

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(g + 1 for g in self.n_levels)

    def _view(self, flat: NDArray) -> NDArray:
        return flat.reshape(self.shape, order='F')

    def marginal(self, selection: Selection) -> CellSums:
        """
        Cell sums at the granularity of a factor selection.

        Factors outside the selection are summed over and their position
        holds code 0. Only cells at levels 1..G of the selected factors
        are returned, flattened, occupied or not.

        Args:
            selection: One flag per factor; True keeps the factor

        Returns:
            (counts, sums, sumsq) for every cell of the selection
        """
        key = tuple(bool(s) for s in selection)
        if len(key) != self.n_factors:
            raise ValueError(
                f"selection has {len(key)} flags, expected {self.n_factors}"
            )

        cached = self._materialized.get(key)
        if cached is not None:
            return cached

        full = tuple(slice(1, None) for _ in key)
        target = tuple(slice(1, None) if keep else slice(0, 1) for keep in key)
        axes = tuple(j for j, keep in enumerate(key) if not keep)

        out = []
        for flat in (self.counts, self.sums, self.sumsq):
            view = self._view(flat)
            if axes:
                view[target] += view[full].sum(axis=axes, keepdims=True)
            out.append(view[target].ravel(order='F'))

        result = (out[0], out[1], out[2])
        self._materialized[key] = result
        return result

    def grand_totals(self) -> tuple[int, float, float]:
        """Count, sum and sum of squares over every observation."""
        n, s, ss = self.marginal((False,) * self.n_factors)
        return int(n[0]), float(s[0]), float(ss[0])


def cell_index(codes: NDArray[np.int64], table: InteractionTable) -> NDArray[np.int64]:
    """Mixed-radix flat index of each observation's fully-specified cell."""
    weights = np.asarray(table.place_values, dtype=np.int64)
    return codes @ weights


def aggregate_cells(
    y: NDArray[np.float64],
    codes: NDArray[np.int64],
    table: InteractionTable,
    *,
    max_cells: int = DEFAULT_MAX_CELLS,
) -> CellTable:
    """
    Accumulate per-cell count, sum and sum of squares.

    Args:
        y: Response values (n,)
        codes: Relabeled grouping (n, w), 1-based
        table: Interaction table carrying the addressing scheme
        max_cells: Largest flat table that may be allocated

    Returns:
        CellTable with the fully-specified cells filled

    Raises:
        CapacityError: If the table would exceed max_cells
        ValidationError: If max_cells is not a positive integer
    """
    if isinstance(max_cells, bool) or not isinstance(max_cells, Integral) or max_cells < 1:
        raise ValidationError(
            f"max_cells: expected a positive integer, got {max_cells!r}"
        )

    required = table.n_cells
    if required > max_cells:
        raise CapacityError(
            f"cell table needs {required} cells "
            f"(levels {table.n_levels}), limit is {max_cells}",
            required=required,
            limit=max_cells,
        )

    idx = cell_index(codes, table)
    counts = np.bincount(idx, minlength=required).astype(np.int64)
    sums = np.bincount(idx, weights=y, minlength=required)
    sumsq = np.bincount(idx, weights=y * y, minlength=required)

    return CellTable(
        counts=counts,
        sums=sums,
        sumsq=sumsq,
        n_levels=table.n_levels,
    )
