"""
User-facing n-way ANOVA solution type.

Wraps a Result[AnovanParams] and provides the programmatic outputs
(p-values, F statistics, degrees of freedom) and the formatted table.
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from statbox.core.result import Result
from statbox.anova._common import AnovanParams, AnovanTableRow


RULE_WIDTH = 69


@dataclass
class AnovanSolution:
    """
    User-facing result for n-way ANOVA.

    Produced by anovan().
    """
    _result: Result[AnovanParams]

    @property
    def table(self) -> tuple[AnovanTableRow, ...]:
        """ANOVA table: one row per term (ascending order), then Error."""
        return self._result.params.table

    @property
    def terms(self) -> tuple[AnovanTableRow, ...]:
        """Table rows of the tested terms, without the Error row."""
        return self.table[:-1]

    @property
    def error(self) -> AnovanTableRow:
        return self.table[-1]

    @property
    def p_values(self) -> NDArray[np.float64]:
        return np.array([row.p_value for row in self.terms], dtype=np.float64)

    @property
    def f_values(self) -> NDArray[np.float64]:
        return np.array([row.f_value for row in self.terms], dtype=np.float64)

    @property
    def df_between(self) -> NDArray[np.int64]:
        return np.array([row.df for row in self.terms], dtype=np.int64)

    @property
    def df_within(self) -> int:
        return self._result.params.error_df

    @property
    def sst(self) -> float:
        return self._result.params.total_ss

    @property
    def sse(self) -> float:
        return self._result.params.error_ss

    @property
    def mse(self) -> float:
        return self._result.params.error_ms

    @property
    def n_obs(self) -> int:
        return self._result.params.n_obs

    @property
    def grand_mean(self) -> float:
        return self._result.params.grand_mean

    @property
    def factor_names(self) -> tuple[str, ...]:
        return self._result.params.factor_names

    @property
    def n_levels(self) -> tuple[int, ...]:
        return self._result.params.n_levels

    @property
    def level_maps(self) -> tuple[NDArray, ...]:
        """Original group labels of each factor, indexed by code - 1."""
        return self._result.params.level_maps

    @property
    def max_order(self) -> int:
        return self._result.params.max_order

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def row(self, term: str) -> AnovanTableRow:
        """Look up a table row by its label, e.g. 'A x B' or 'Error'."""
        for r in self.table:
            if r.term == term:
                return r
        raise KeyError(
            f"no term {term!r}; available: {[r.term for r in self.table]}"
        )

    def summary(self) -> str:
        """Generate the fixed-width n-way ANOVA table."""
        names = self.factor_names
        err = self.error
        lines = [
            "",
            f"{len(names)}-way ANOVA Table (Factors {','.join(names)}):",
            "",
            "Source of Variation        Sum Sqr   df      MeanSS    Fval   p-value",
            "*" * RULE_WIDTH,
            f"Error                  {err.sum_sq:10.2f}  {err.df:4d} {err.mean_sq:10.2f}",
        ]

        for r in sorted(self.terms, key=lambda r: r.order):
            lines.append(
                f"Factor {r.term:>15} {r.sum_sq:10.2f}  {r.df:4d} "
                f"{r.mean_sq:10.2f}  {r.f_value:7.3f}  {r.p_value:7.6f}"
            )

        lines.append("")
        return "\n".join(lines)

    def __repr__(self) -> str:
        terms = [r.term for r in self.terms]
        return (
            f"AnovanSolution(n={self.n_obs}, factors={len(self.factor_names)}, "
            f"terms={terms})"
        )
