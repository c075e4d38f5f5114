"""
Exponential distribution, parameterized by its mean mu.

The maximum likelihood estimate is the sample mean; its confidence
interval is exact, from 2 * n * mean / mu ~ chi-square(2n).
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from statbox.core.exceptions import ValidationError
from statbox.core.validation import check_probability
from statbox.distributions.base import ProbabilityDistribution


class ExponentialDistribution(ProbabilityDistribution):
    """Exponential distribution with mean mu > 0."""

    distribution_name = "ExponentialDistribution"
    distribution_code = "exp"
    parameter_names = ("mu",)
    parameter_description = ("Mean",)
    parameter_log_ci = (True,)

    def __init__(self, mu: float = 1.0):
        super().__init__(mu)

    @property
    def mu(self) -> float:
        return float(self._values[0])

    def _frozen(self):
        return sp_stats.expon(scale=self.mu)

    @classmethod
    def _check_params(cls, *values: float) -> None:
        (mu,) = values
        if not (np.isscalar(mu) and np.isreal(mu) and np.isfinite(mu) and mu > 0):
            raise ValidationError(
                f"ExponentialDistribution: mu must be a positive real scalar, got {mu!r}"
            )

    @classmethod
    def _check_data(cls, x: NDArray[np.float64]) -> None:
        if np.any(x < 0):
            raise ValidationError("x: Exponential data must be non-negative")

    @classmethod
    def _mle(
        cls,
        x: NDArray[np.float64],
        freq: NDArray[np.float64],
    ) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        n = float(np.sum(freq))
        mu = float(np.sum(freq * x) / n)
        if mu == 0:
            raise ValidationError("x: Exponential fit requires some positive data")
        return np.array([mu]), np.array([[mu ** 2 / n]])

    def paramci(self, alpha: float = 0.05) -> NDArray[np.float64]:
        alpha = check_probability(alpha, "alpha")
        if self.input_data is None:
            return super().paramci(alpha)
        dof = 2 * self.input_data.n
        return np.array([
            [dof * self.mu / sp_stats.chi2.ppf(1.0 - alpha / 2.0, dof)],
            [dof * self.mu / sp_stats.chi2.ppf(alpha / 2.0, dof)],
        ])
