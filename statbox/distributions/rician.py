"""
Rician distribution.

The distribution of the magnitude of a bivariate normal vector with
non-centrality distance nu and per-component scale sigma:

    f(x; nu, sigma) = x / sigma^2 * exp(-(x^2 + nu^2) / (2 sigma^2))
                      * I0(x nu / sigma^2),     x >= 0

Evaluated through scipy.stats.rice with shape b = nu / sigma and
scale = sigma.
"""

from __future__ import annotations

import warnings

import numpy as np
from numpy.typing import NDArray
from scipy import optimize
from scipy import stats as sp_stats

from statbox.core.exceptions import ConvergenceError, ValidationError
from statbox.distributions.base import ProbabilityDistribution, numerical_hessian

MAX_ITER = 500
MAX_FUN_EVALS = 2000
TOL_F = 1e-12
# Lower bound on sigma, relative to the root mean square of the data
SIGMA_FLOOR = 1e-8


class RicianDistribution(ProbabilityDistribution):
    """Rician distribution with parameters nu >= 0 and sigma > 0."""

    distribution_name = "RicianDistribution"
    distribution_code = "rice"
    parameter_names = ("nu", "sigma")
    parameter_description = ("Non-centrality Distance", "Scale")
    parameter_log_ci = (True, True)

    def __init__(self, nu: float = 1.0, sigma: float = 1.0):
        super().__init__(nu, sigma)

    @property
    def nu(self) -> float:
        return float(self._values[0])

    @property
    def sigma(self) -> float:
        return float(self._values[1])

    def _frozen(self):
        return sp_stats.rice(self.nu / self.sigma, scale=self.sigma)

    @classmethod
    def _check_params(cls, *values: float) -> None:
        nu, sigma = values
        if not (np.isscalar(nu) and np.isreal(nu) and np.isfinite(nu) and nu >= 0):
            raise ValidationError(
                f"RicianDistribution: nu must be a non-negative real scalar, got {nu!r}"
            )
        if not (np.isscalar(sigma) and np.isreal(sigma) and np.isfinite(sigma)
                and sigma > 0):
            raise ValidationError(
                f"RicianDistribution: sigma must be a positive real scalar, got {sigma!r}"
            )

    @classmethod
    def _check_data(cls, x: NDArray[np.float64]) -> None:
        if np.any(x < 0):
            raise ValidationError("x: Rician data must be non-negative")

    @classmethod
    def _mle(
        cls,
        x: NDArray[np.float64],
        freq: NDArray[np.float64],
    ) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        if np.sum(freq) < 2:
            raise ValidationError("x: Rician fit requires at least 2 observations")
        if not np.any(x > 0):
            raise ValidationError("x: Rician fit requires some positive data")

        # nll is even in nu, so |nu| keeps finite differences valid at nu = 0
        def nll(theta: NDArray[np.float64]) -> float:
            nu, sigma = abs(theta[0]), theta[1]
            logpdf = sp_stats.rice.logpdf(x, nu / sigma, scale=sigma)
            return float(-np.sum(freq * logpdf))

        n = float(np.sum(freq))
        start = _moment_start(x, freq)
        scale = float(np.sqrt(np.sum(freq * x ** 2) / n))

        # Unit-scale parameters and a per-observation objective
        res = optimize.minimize(
            lambda z: nll(z * scale) / n,
            start / scale,
            method='L-BFGS-B',
            bounds=[(0.0, None), (SIGMA_FLOOR, None)],
            options={'maxiter': MAX_ITER, 'maxfun': MAX_FUN_EVALS, 'ftol': TOL_F},
        )
        theta = res.x * scale
        if not np.all(np.isfinite(theta)):
            raise ConvergenceError(
                f"Rician fit diverged: {res.message}",
                iterations=int(res.nit),
                reason='diverging',
            )
        if not res.success:
            warnings.warn(
                f"Rician fit did not converge after {res.nit} iterations "
                f"({res.message}); returning the last estimate"
            )

        hess = numerical_hessian(nll, theta)
        try:
            cov = np.linalg.inv(hess)
        except np.linalg.LinAlgError:
            warnings.warn(
                "Rician fit: singular information matrix, covariance is undefined"
            )
            cov = np.full((2, 2), np.nan)

        # Information about nu vanishes as nu -> 0
        bad = ~(np.diag(cov) > 0)
        if np.any(bad) and np.all(np.isfinite(cov)):
            warnings.warn(
                "Rician fit: information matrix is not positive definite at "
                "the estimate, affected variances are undefined"
            )
        cov[bad, :] = np.nan
        cov[:, bad] = np.nan
        return theta, cov


def _moment_start(x: NDArray[np.float64], freq: NDArray[np.float64]) -> NDArray[np.float64]:
    """Method-of-moments starting point from E[x^2] and E[x^4]."""
    w = freq / np.sum(freq)
    m2 = float(np.sum(w * x ** 2))
    m4 = float(np.sum(w * x ** 4))
    nu2 = np.sqrt(max(2.0 * m2 ** 2 - m4, 0.0))
    if nu2 >= m2:
        nu2 = 0.5 * m2
    sigma2 = (m2 - nu2) / 2.0
    nu = max(np.sqrt(nu2), 0.1 * np.sqrt(m2))
    return np.array([nu, np.sqrt(max(sigma2, 1e-12 * m2))])
