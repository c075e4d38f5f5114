"""
Common data types for distribution fitting.
"""

from dataclasses import dataclass

from numpy.typing import NDArray

from statbox.distributions.base import ProbabilityDistribution


@dataclass(frozen=True)
class FitDistParams:
    """
    Parameter payload for fitdist().

    Group fields are None when no grouping variable was given.
    """
    distname: str
    distributions: tuple[ProbabilityDistribution, ...]
    alpha: float
    n_obs: int
    group_names: tuple[str, ...] | None
    group_labels: NDArray | None
