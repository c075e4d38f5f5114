"""
Multi-way Analysis of Variance.

Public API:
    anovan(y, groups, ...) -> AnovanSolution    # n-way factorial ANOVA

Building blocks:
    relabel_groups(groups)               -> GroupCoding
    build_interaction_table(n_levels)    -> InteractionTable
    aggregate_cells(y, codes, table)     -> CellTable
    term_effect(cells, term)             -> TermStats
"""

from statbox.anova.solvers import anovan, f_pvalue
from statbox.anova.solution import AnovanSolution
from statbox.anova._common import AnovanParams, AnovanTableRow, TermStats
from statbox.anova._relabel import GroupCoding, relabel_groups
from statbox.anova._interactions import (
    InteractionTable,
    InteractionTerm,
    build_interaction_table,
    enumerate_terms,
)
from statbox.anova._cells import DEFAULT_MAX_CELLS, CellTable, aggregate_cells
from statbox.anova._effects import term_effect

__all__ = [
    "anovan",
    "f_pvalue",
    "AnovanSolution",
    "AnovanParams",
    "AnovanTableRow",
    "TermStats",
    "GroupCoding",
    "relabel_groups",
    "InteractionTable",
    "InteractionTerm",
    "build_interaction_table",
    "enumerate_terms",
    "DEFAULT_MAX_CELLS",
    "CellTable",
    "aggregate_cells",
    "term_effect",
]
