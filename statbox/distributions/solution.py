"""
User-facing result of fitdist().
"""

from dataclasses import dataclass
from typing import Any

from numpy.typing import NDArray

from statbox.core.result import Result
from statbox.distributions._common import FitDistParams
from statbox.distributions.base import ProbabilityDistribution


@dataclass
class FitDistSolution:
    """
    Fitted distribution(s), one per group when a grouping variable is given.

    Produced by fitdist().
    """
    _result: Result[FitDistParams]

    @property
    def distname(self) -> str:
        return self._result.params.distname

    @property
    def distributions(self) -> tuple[ProbabilityDistribution, ...]:
        return self._result.params.distributions

    @property
    def distribution(self) -> ProbabilityDistribution:
        """The single fitted distribution of an ungrouped fit."""
        if self.is_grouped:
            raise ValueError(
                "grouped fit holds one distribution per group; "
                "use .distributions or .by_group()"
            )
        return self.distributions[0]

    @property
    def is_grouped(self) -> bool:
        return self._result.params.group_names is not None

    @property
    def group_names(self) -> tuple[str, ...] | None:
        return self._result.params.group_names

    @property
    def group_labels(self) -> NDArray | None:
        return self._result.params.group_labels

    @property
    def alpha(self) -> float:
        return self._result.params.alpha

    @property
    def n_obs(self) -> int:
        return self._result.params.n_obs

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def by_group(self) -> dict[str, ProbabilityDistribution]:
        if not self.is_grouped:
            raise ValueError("fit was not grouped")
        return dict(zip(self.group_names, self.distributions))

    def summary(self) -> str:
        lines = [f"Fitted {self.distname} distribution ({self.n_obs} observations)", ""]
        if self.is_grouped:
            for name, pd in zip(self.group_names, self.distributions):
                lines.append(f"Group {name}:")
                lines.append(pd.summary())
                lines.append("")
        else:
            lines.append(self.distribution.summary())
        return "\n".join(lines)

    def __repr__(self) -> str:
        groups = len(self.distributions) if self.is_grouped else None
        return f"FitDistSolution(distname={self.distname!r}, groups={groups})"
