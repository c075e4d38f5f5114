"""
Factor effect calculation by inclusion-exclusion.

For a term T the corrected sum of squares is

    SS(T) = sum over S subset of T of (-1)^|T \\ S| * RawSS(S)

where RawSS(S) = sum over occupied cells of sum^2 / count, with the cells
taken at the granularity of S (all other factors summed over). RawSS of the
empty selection is the grand-mean correction N * mean^2.

Degrees of freedom are structural: the product over the factors of T of
(levels observed - 1). This is exact for balanced designs and an
approximation for unbalanced ones.
"""

from itertools import combinations

import numpy as np

from statbox.anova._cells import CellTable, Selection
from statbox.anova._common import TermStats
from statbox.anova._interactions import InteractionTerm

# Relative size below which a negative corrected SS is treated as round-off
ROUNDOFF_RTOL = 1e-10


def raw_ss(cells: CellTable, selection: Selection) -> tuple[float, int]:
    """
    Uncorrected sum of squares at the granularity of a selection.

    Returns:
        (sum of sum^2 / count over occupied cells, number of occupied cells)
    """
    n, s, _ = cells.marginal(selection)
    occupied = n > 0
    with np.errstate(divide='ignore', invalid='ignore'):
        contrib = s[occupied] ** 2 / n[occupied]
    contrib = contrib[np.isfinite(contrib)]
    return float(np.sum(contrib)), int(np.count_nonzero(occupied))


def levels_used(cells: CellTable, factor: int) -> int:
    """Number of levels of one factor that hold at least one observation."""
    selection = tuple(j == factor for j in range(cells.n_factors))
    return raw_ss(cells, selection)[1]


def term_effect(cells: CellTable, term: InteractionTerm) -> TermStats:
    """
    Corrected sum of squares, degrees of freedom and mean square of a term.

    Negative results within round-off of the raw sums are clamped to zero.
    Larger negative values are returned as-is so the caller can report
    an ill-conditioned (unbalanced) design.
    """
    factors = term.factors
    ss = 0.0
    scale = 0.0
    for n_removed in range(len(factors) + 1):
        sign = -1.0 if n_removed % 2 else 1.0
        for removed in combinations(factors, n_removed):
            selection = tuple(
                keep and j not in removed for j, keep in enumerate(term.mask)
            )
            raw, _ = raw_ss(cells, selection)
            ss += sign * raw
            scale += abs(raw)

    if ss < 0 and -ss <= ROUNDOFF_RTOL * scale:
        ss = 0.0

    df = 1
    for f in factors:
        df *= levels_used(cells, f) - 1

    mean_sq = ss / df if df > 0 else float('nan')
    return TermStats(sum_sq=ss, df=df, mean_sq=mean_sq)


def total_ss(cells: CellTable) -> float:
    """Total corrected sum of squares, gss - gs^2 / gn over all data."""
    n, s, ss = cells.grand_totals()
    return ss - s * s / n


def error_df(cells: CellTable) -> int:
    """Sum of (n - 1) over the occupied fully-crossed cells."""
    n, _, _ = cells.marginal((True,) * cells.n_factors)
    occupied = n[n > 0]
    return int(np.sum(occupied - 1))
