"""
Normal distribution.

Fitting uses the closed-form estimates (sample mean and Bessel-corrected
standard deviation) with exact t and chi-square confidence intervals.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats

from statbox.core.exceptions import ValidationError
from statbox.core.validation import check_probability
from statbox.distributions.base import ProbabilityDistribution


class NormalDistribution(ProbabilityDistribution):
    """Normal distribution with mean mu and standard deviation sigma > 0."""

    distribution_name = "NormalDistribution"
    distribution_code = "norm"
    parameter_names = ("mu", "sigma")
    parameter_description = ("Mean", "Standard Deviation")
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
        return sp_stats.norm(loc=self.mu, scale=self.sigma)

    @classmethod
    def _check_params(cls, *values: float) -> None:
        mu, sigma = values
        if not (np.isscalar(mu) and np.isreal(mu) and np.isfinite(mu)):
            raise ValidationError(
                f"NormalDistribution: mu must be a finite real scalar, got {mu!r}"
            )
        if not (np.isscalar(sigma) and np.isreal(sigma) and np.isfinite(sigma)
                and sigma > 0):
            raise ValidationError(
                f"NormalDistribution: sigma must be a positive real scalar, got {sigma!r}"
            )

    @classmethod
    def _mle(
        cls,
        x: NDArray[np.float64],
        freq: NDArray[np.float64],
    ) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        return normal_mle(x, freq)

    def paramci(self, alpha: float = 0.05) -> NDArray[np.float64]:
        alpha = check_probability(alpha, "alpha")
        if self.input_data is None:
            return super().paramci(alpha)
        return normal_ci(self.mu, self.sigma, self.input_data.n, alpha)


def normal_mle(
    x: NDArray[np.float64],
    freq: NDArray[np.float64],
    what: str = "Normal",
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Weighted mean, Bessel-corrected standard deviation and their covariance."""
    n = float(np.sum(freq))
    if n < 2:
        raise ValidationError(f"x: {what} fit requires at least 2 observations")
    mu = float(np.sum(freq * x) / n)
    sigma = float(np.sqrt(np.sum(freq * (x - mu) ** 2) / (n - 1)))
    if sigma == 0:
        raise ValidationError(f"x: {what} fit requires non-constant data")
    cov = np.diag([sigma ** 2 / n, sigma ** 2 / (2.0 * (n - 1))])
    return np.array([mu, sigma]), cov


def normal_ci(mu: float, sigma: float, n: int, alpha: float) -> NDArray[np.float64]:
    """Exact t interval for mu and chi-square interval for sigma."""
    t = sp_stats.t.ppf(1.0 - alpha / 2.0, n - 1)
    half = t * sigma / np.sqrt(n)
    chi_hi = sp_stats.chi2.ppf(1.0 - alpha / 2.0, n - 1)
    chi_lo = sp_stats.chi2.ppf(alpha / 2.0, n - 1)
    return np.array([
        [mu - half, sigma * np.sqrt((n - 1) / chi_hi)],
        [mu + half, sigma * np.sqrt((n - 1) / chi_lo)],
    ])
