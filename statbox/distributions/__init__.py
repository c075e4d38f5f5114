"""
Probability distribution objects and fitting.

Public API:
    fitdist(x, distname, ...) -> FitDistSolution
    RicianDistribution(nu, sigma)
    NormalDistribution(mu, sigma)
    ExponentialDistribution(mu)
    LognormalDistribution(mu, sigma)
    register_distribution(name, cls) / get_distribution(name)
    distribution_names()
"""

from statbox.distributions.base import FitData, ProbabilityDistribution
from statbox.distributions.exponential import ExponentialDistribution
from statbox.distributions.lognormal import LognormalDistribution
from statbox.distributions.normal import NormalDistribution
from statbox.distributions.rician import RicianDistribution
from statbox.distributions.registry import (
    distribution_names,
    get_distribution,
    register_distribution,
)
from statbox.distributions.fitdist import fitdist
from statbox.distributions.solution import FitDistSolution

__all__ = [
    "fitdist",
    "FitDistSolution",
    "FitData",
    "ProbabilityDistribution",
    "NormalDistribution",
    "RicianDistribution",
    "ExponentialDistribution",
    "LognormalDistribution",
    "register_distribution",
    "get_distribution",
    "distribution_names",
]
