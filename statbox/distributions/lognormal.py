"""
Lognormal distribution: log(x) is Normal(mu, sigma).

Fitting reuses the Normal estimates and exact intervals on log(x).
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from statbox.core.exceptions import ValidationError
from statbox.core.validation import check_probability
from statbox.distributions.base import ProbabilityDistribution
from statbox.distributions.normal import normal_ci, normal_mle


class LognormalDistribution(ProbabilityDistribution):
    """Lognormal distribution with log-mean mu and log-standard deviation sigma > 0."""

    distribution_name = "LognormalDistribution"
    distribution_code = "logn"
    parameter_names = ("mu", "sigma")
    parameter_description = ("Log Mean", "Log Standard Deviation")
    parameter_log_ci = (False, True)

    def __init__(self, mu: float = 0.0, sigma: float = 1.0):
        super().__init__(mu, sigma)

    @property
    def mu(self) -> float:
        return float(self._values[0])

    @property
    def sigma(self) -> float:
        return float(self._values[1])

    def _frozen(self):
        return sp_stats.lognorm(self.sigma, scale=np.exp(self.mu))

    @classmethod
    def _check_params(cls, *values: float) -> None:
        mu, sigma = values
        if not (np.isscalar(mu) and np.isreal(mu) and np.isfinite(mu)):
            raise ValidationError(
                f"LognormalDistribution: mu must be a finite real scalar, got {mu!r}"
            )
        if not (np.isscalar(sigma) and np.isreal(sigma) and np.isfinite(sigma)
                and sigma > 0):
            raise ValidationError(
                f"LognormalDistribution: sigma must be a positive real scalar, got {sigma!r}"
            )

    @classmethod
    def _check_data(cls, x: NDArray[np.float64]) -> None:
        if np.any(x <= 0):
            raise ValidationError("x: Lognormal data must be positive")

    @classmethod
    def _mle(
        cls,
        x: NDArray[np.float64],
        freq: NDArray[np.float64],
    ) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        return normal_mle(np.log(x), freq, what="Lognormal")

    def paramci(self, alpha: float = 0.05) -> NDArray[np.float64]:
        alpha = check_probability(alpha, "alpha")
        if self.input_data is None:
            return super().paramci(alpha)
        return normal_ci(self.mu, self.sigma, self.input_data.n, alpha)
