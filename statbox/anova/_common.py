"""
Common data types for n-way ANOVA.

Contains the frozen parameter payloads that go inside Result[P] envelopes.
Each payload is a pure data container: no methods, no computation.
"""

from dataclasses import dataclass

from numpy.typing import NDArray


@dataclass(frozen=True)
class TermStats:
    """Corrected sum of squares for one interaction term."""
    sum_sq: float
    df: int
    mean_sq: float


@dataclass(frozen=True)
class AnovanTableRow:
    """One row of an n-way ANOVA table (one term or the error row)."""
    term: str
    order: int                # number of factors in the term, 0 for Error
    sum_sq: float
    df: int
    mean_sq: float
    f_value: float | None     # None for Error row
    p_value: float | None     # None for Error row


@dataclass(frozen=True)
class AnovanParams:
    """
    Parameter payload for n-way ANOVA.

    The table holds one row per tested term in enumeration order
    (ascending interaction order) followed by the Error row.
    """
    table: tuple[AnovanTableRow, ...]
    factor_names: tuple[str, ...]
    n_obs: int
    max_order: int
    n_levels: tuple[int, ...]                  # levels per factor (label space)
    level_maps: tuple[NDArray, ...]            # code - 1 -> original label
    total_ss: float
    error_ss: float
    error_df: int
    error_ms: float
    grand_mean: float
