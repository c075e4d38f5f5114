"""
n-way ANOVA solver.

Public API:
    anovan(y, groups, ...) -> AnovanSolution

Pipeline:
    relabel groups -> enumerate interaction terms -> aggregate cell sums
    -> corrected SS per term -> error term -> F and p-values
"""

import time
from typing import Any

import numpy as np
from scipy import stats as sp_stats

from statbox.core.result import Result
from statbox.core.exceptions import DegenerateDesignError
from statbox.anova._common import AnovanParams, AnovanTableRow, TermStats
from statbox.anova._cells import DEFAULT_MAX_CELLS, aggregate_cells
from statbox.anova._effects import error_df, term_effect, total_ss
from statbox.anova._interactions import build_interaction_table
from statbox.anova._relabel import relabel_groups
from statbox.anova.design import AnovanDesign
from statbox.anova.solution import AnovanSolution


def anovan(
    y: Any,
    groups: Any,
    *,
    max_order: int | None = None,
    names: Any = None,
    label_space: str = 'factor',
    max_cells: int = DEFAULT_MAX_CELLS,
    display: bool = False,
) -> AnovanSolution:
    """
    Multi-way Analysis of Variance.

    Tests whether the population means of data taken under different
    combinations of factor levels are equal. Every main effect and every
    interaction up to max_order is tested against the within-cell error.

    Args:
        y: Response variable (numeric vector of length n)
        groups: (n, w) matrix of group labels, 1D labels for one factor, or
            {name: 1D labels}. Labels need not be sequential integers.
        max_order: Highest interaction order to test. Default: all w
            factors. Variation of higher-order terms is pooled into error.
        names: Factor names for the report. Default: A, B, C, ...
        label_space: 'factor' (independent labels per factor, default) or
            'shared' (one label universe across factors).
        max_cells: Largest cell table that may be allocated.
        display: If True, print the ANOVA table.

    Returns:
        AnovanSolution with p-values, F statistics, degrees of freedom and
        the full ANOVA table.

    Raises:
        ValidationError / DimensionError: malformed input
        CapacityError: the cell table would exceed max_cells
        DegenerateDesignError: no replication, so error df is zero

    Examples:
        >>> result = anovan(y, np.column_stack([a, b]))
        >>> result.p_values
        >>> print(result.summary())
    """
    t0 = time.perf_counter()

    design = AnovanDesign.for_nway(y, groups, names=names)
    coding = relabel_groups(
        design.groups, label_space=label_space, names=design.factor_names,
    )
    int_tbl = build_interaction_table(coding.n_levels, max_order)

    # SS are shift invariant; centering keeps gss - gs^2/gn well conditioned
    grand_mean = float(np.mean(design.y))
    cells = aggregate_cells(
        design.y - grand_mean, coding.codes, int_tbl, max_cells=max_cells,
    )
    t_aggregate = time.perf_counter()

    warnings: list[str] = []
    effects = [term_effect(cells, term) for term in int_tbl.terms]
    for term, effect in zip(int_tbl.terms, effects):
        if effect.sum_sq < 0:
            warnings.append(
                f"negative sum of squares for {term.label(design.factor_names)} "
                f"({effect.sum_sq:.6g}); design is too unbalanced for the "
                f"structural decomposition"
            )

    sst = total_ss(cells)
    sse = sst - sum(e.sum_sq for e in effects)
    if sse < 0 and -sse <= 1e-10 * max(abs(sst), 1.0):
        sse = 0.0

    dfe = error_df(cells)
    pooled = int_tbl.omitted_terms
    if pooled:
        dfe += sum(term_effect(cells, term).df for term in pooled)

    if dfe <= 0:
        raise DegenerateDesignError(
            f"error degrees of freedom is {dfe}: every combination of factor "
            f"levels needs replication for the F test to be defined",
            df_error=dfe,
            n_cells=int(np.count_nonzero(cells.marginal((True,) * design.n_factors)[0])),
        )

    mse = sse / dfe
    if mse == 0:
        warnings.append(
            "error mean square is zero; F statistics are infinite or undefined"
        )

    rows = [
        _term_row(term.label(design.factor_names), term.order, effect, mse, dfe)
        for term, effect in zip(int_tbl.terms, effects)
    ]
    rows.append(AnovanTableRow(
        term='Error',
        order=0,
        sum_sq=sse,
        df=dfe,
        mean_sq=mse,
        f_value=None,
        p_value=None,
    ))

    elapsed = time.perf_counter() - t0

    params = AnovanParams(
        table=tuple(rows),
        factor_names=design.factor_names,
        n_obs=design.n,
        max_order=int_tbl.max_order,
        n_levels=coding.n_levels,
        level_maps=coding.level_maps,
        total_ss=sst,
        error_ss=sse,
        error_df=dfe,
        error_ms=mse,
        grand_mean=grand_mean,
    )

    result = Result(
        params=params,
        info={
            'design_type': 'nway',
            'n_factors': design.n_factors,
            'label_space': coding.label_space,
            'n_cells': int_tbl.n_cells,
            'pooled_terms': tuple(t.label(design.factor_names) for t in pooled),
        },
        timing={
            'aggregate_seconds': t_aggregate - t0,
            'total_seconds': elapsed,
        },
        backend_name='cpu',
        warnings=tuple(warnings),
    )

    solution = AnovanSolution(_result=result)
    if display:
        print(solution.summary())
    return solution


def f_pvalue(f_value: float, df_num: int, df_den: int) -> float:
    """Upper-tail probability 1 - F_CDF(f; df_num, df_den)."""
    if np.isnan(f_value) or df_num <= 0:
        return float('nan')
    return float(sp_stats.f.sf(f_value, df_num, df_den))


def _term_row(
    label: str,
    order: int,
    effect: TermStats,
    mse: float,
    dfe: int,
) -> AnovanTableRow:
    with np.errstate(divide='ignore', invalid='ignore'):
        f_val = float(np.float64(effect.mean_sq) / np.float64(mse))
    return AnovanTableRow(
        term=label,
        order=order,
        sum_sq=effect.sum_sq,
        df=effect.df,
        mean_sq=effect.mean_sq,
        f_value=f_val,
        p_value=f_pvalue(f_val, effect.df, dfe),
    )
