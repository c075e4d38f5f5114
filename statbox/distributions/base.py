"""
Probability distribution objects.

A ProbabilityDistribution holds one parameter vector and evaluates pdf, cdf,
inverse cdf and random draws, optionally restricted to a truncation
interval. Distributions created by fit() additionally carry the data they
were fitted to, the asymptotic parameter covariance and confidence intervals.

Subclasses provide:
    - _frozen(): the untruncated scipy.stats frozen distribution
    - _check_params(*values): parameter validation
    - _mle(x, freq): maximum likelihood estimates and their covariance
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import integrate
from scipy import stats as sp_stats

from statbox.core.exceptions import ValidationError
from statbox.core.validation import (
    check_array,
    check_finite,
    check_probability,
    check_vector,
)


@dataclass(frozen=True)
class FitData:
    """Observations a distribution was fitted to."""
    data: NDArray[np.float64]
    freq: NDArray[np.float64]

    @property
    def n(self) -> int:
        return int(np.sum(self.freq))


class ProbabilityDistribution(ABC):
    """Abstract parametric distribution with optional truncation."""

    distribution_name: ClassVar[str]
    distribution_code: ClassVar[str]
    parameter_names: ClassVar[tuple[str, ...]]
    parameter_description: ClassVar[tuple[str, ...]]
    # Wald intervals are built on the log scale for these parameters,
    # falling back to a linear interval clipped at 0 near the boundary
    parameter_log_ci: ClassVar[tuple[bool, ...]]

    def __init__(self, *values: float):
        self._check_params(*values)
        self._values = np.array(values, dtype=np.float64)
        self.parameter_is_fixed: tuple[bool, ...] = (True,) * len(values)
        self.parameter_covariance = np.zeros((len(values), len(values)))
        self.parameter_ci: NDArray | None = None
        self.truncation: tuple[float, float] | None = None
        self.input_data: FitData | None = None

    # --- Parameters ---

    @property
    def num_parameters(self) -> int:
        return len(self.parameter_names)

    @property
    def parameter_values(self) -> tuple[float, ...]:
        return tuple(float(v) for v in self._values)

    @property
    def is_truncated(self) -> bool:
        return self.truncation is not None

    @property
    def is_fitted(self) -> bool:
        return self.input_data is not None

    # --- Subclass hooks ---

    @abstractmethod
    def _frozen(self) -> Any:
        """Untruncated scipy.stats frozen distribution."""
        ...

    @classmethod
    @abstractmethod
    def _check_params(cls, *values: float) -> None:
        ...

    @classmethod
    @abstractmethod
    def _mle(
        cls,
        x: NDArray[np.float64],
        freq: NDArray[np.float64],
    ) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Maximum likelihood estimates and asymptotic covariance."""
        ...

    @classmethod
    def _check_data(cls, x: NDArray[np.float64]) -> None:
        """Reject data outside the support. Default: any finite value."""
        return None

    # --- Evaluation ---

    def _mass(self) -> tuple[float, float]:
        """CDF at the lower truncation point and mass inside the interval."""
        lo, hi = self.truncation
        frozen = self._frozen()
        f_lo = float(frozen.cdf(lo))
        return f_lo, float(frozen.cdf(hi)) - f_lo

    def pdf(self, x: ArrayLike) -> NDArray[np.float64]:
        x = np.asarray(x, dtype=np.float64)
        y = self._frozen().pdf(x)
        if self.is_truncated:
            lo, hi = self.truncation
            _, mass = self._mass()
            y = np.where((x < lo) | (x > hi), 0.0, y / mass)
        return y

    def cdf(self, x: ArrayLike, *, upper: bool = False) -> NDArray[np.float64]:
        """Cumulative probability, or the upper tail when upper=True."""
        x = np.asarray(x, dtype=np.float64)
        p = self._frozen().cdf(x)
        if self.is_truncated:
            lo, hi = self.truncation
            f_lo, mass = self._mass()
            p = np.where(x < lo, 0.0, np.where(x > hi, 1.0, (p - f_lo) / mass))
        return 1.0 - p if upper else p

    def icdf(self, p: ArrayLike) -> NDArray[np.float64]:
        p = np.asarray(p, dtype=np.float64)
        if self.is_truncated:
            f_lo, mass = self._mass()
            p = f_lo + mass * p
        return self._frozen().ppf(p)

    def random(
        self,
        size: int | tuple[int, ...] | None = None,
        *,
        rng: np.random.Generator | int | None = None,
    ) -> NDArray[np.float64]:
        """Draw random variates (inverse-cdf sampling when truncated)."""
        rng = np.random.default_rng(rng)
        if self.is_truncated:
            return self.icdf(rng.uniform(size=size))
        return self._frozen().rvs(size=size, random_state=rng)

    # --- Summaries ---

    def mean(self) -> float:
        if self.is_truncated:
            lo, hi = self.truncation
            return float(integrate.quad(lambda t: t * float(self.pdf(t)), lo, hi)[0])
        return float(self._frozen().mean())

    def var(self) -> float:
        if self.is_truncated:
            lo, hi = self.truncation
            m = self.mean()
            return float(
                integrate.quad(lambda t: (t - m) ** 2 * float(self.pdf(t)), lo, hi)[0]
            )
        return float(self._frozen().var())

    def std(self) -> float:
        return float(np.sqrt(self.var()))

    def median(self) -> float:
        return float(self.icdf(0.5))

    def iqr(self) -> float:
        q1, q3 = self.icdf([0.25, 0.75])
        return float(q3 - q1)

    # --- Truncation ---

    def truncate(self, lower: float, upper: float) -> ProbabilityDistribution:
        """
        Return a copy restricted to [lower, upper].

        Truncation discards any fitted data: the truncated object describes
        a fixed distribution.
        """
        lower, upper = float(lower), float(upper)
        if not lower < upper:
            raise ValidationError(
                f"truncate: lower ({lower}) must be less than upper ({upper})"
            )
        out = copy.deepcopy(self)
        out.truncation = (lower, upper)
        out.input_data = None
        out.parameter_is_fixed = (True,) * self.num_parameters
        out.parameter_covariance = np.zeros((self.num_parameters,) * 2)
        out.parameter_ci = None
        return out

    # --- Likelihood ---

    def negloglik(self) -> float | None:
        """Negative log likelihood of the fitted data, None if not fitted."""
        if self.input_data is None:
            return None
        d = self.input_data
        return float(-np.sum(d.freq * self._frozen().logpdf(d.data)))

    def paramci(self, alpha: float = 0.05) -> NDArray[np.float64]:
        """
        Confidence intervals for the parameters.

        Returns a (2, k) array: lower bounds in row 0, upper in row 1.
        Unfitted distributions return their parameter values in both rows.
        """
        alpha = check_probability(alpha, "alpha")
        if self.input_data is None:
            return np.vstack([self._values, self._values])

        z = sp_stats.norm.ppf(1.0 - alpha / 2.0)
        se = np.sqrt(np.diag(self.parameter_covariance))
        ci = np.empty((2, self.num_parameters))
        for j, value in enumerate(self._values):
            half = z * se[j]
            if self.parameter_log_ci[j] and value > half:
                ci[:, j] = value * np.exp([-half / value, half / value])
            elif self.parameter_log_ci[j]:
                # too close to zero for a log interval
                ci[:, j] = [np.maximum(value - half, 0.0), value + half]
            else:
                ci[:, j] = [value - half, value + half]
        return ci

    # --- Fitting ---

    @classmethod
    def fit(
        cls,
        x: ArrayLike,
        *,
        freq: ArrayLike | None = None,
        alpha: float = 0.05,
    ) -> ProbabilityDistribution:
        """
        Fit the distribution by maximum likelihood.

        Args:
            x: Observations (numeric vector)
            freq: Non-negative integer frequency of each observation
            alpha: Significance level of the stored confidence intervals

        Returns:
            Fitted distribution carrying covariance, CIs and input data
        """
        x_arr, freq_arr = prepare_fit_data(x, freq)
        cls._check_data(x_arr)
        values, covariance = cls._mle(x_arr, freq_arr)

        pd = cls(*values)
        pd.parameter_is_fixed = (False,) * pd.num_parameters
        pd.parameter_covariance = covariance
        pd.input_data = FitData(data=x_arr, freq=freq_arr)
        pd.parameter_ci = pd.paramci(alpha)
        return pd

    # --- Formatting ---

    def summary(self) -> str:
        title = f"{self.distribution_name}"
        if self.is_truncated:
            lo, hi = self.truncation
            title += f" truncated to [{lo:g}, {hi:g}]"
        lines = [title, "=" * 50]
        for j, name in enumerate(self.parameter_names):
            line = f"  {name:<8} = {self._values[j]:>12.6g}"
            if self.parameter_ci is not None:
                lo, hi = self.parameter_ci[:, j]
                line += f"   [{lo:.6g}, {hi:.6g}]"
            lines.append(line)
        return "\n".join(lines)

    def __repr__(self) -> str:
        params = ", ".join(
            f"{n}={v:.6g}" for n, v in zip(self.parameter_names, self._values)
        )
        return f"{self.__class__.__name__}({params})"


def prepare_fit_data(
    x: ArrayLike,
    freq: ArrayLike | None,
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Validate observations and frequencies; drop zero-frequency rows."""
    x_arr = check_vector(check_array(x, "x"), "x")
    check_finite(x_arr, "x")

    if freq is None:
        freq_arr = np.ones_like(x_arr)
    else:
        freq_arr = check_vector(check_array(freq, "freq"), "freq")
        if freq_arr.shape != x_arr.shape:
            raise ValidationError(
                f"freq: must have the same size as x ({x_arr.shape}), "
                f"got {freq_arr.shape}"
            )
        check_finite(freq_arr, "freq")
        if np.any(freq_arr < 0) or np.any(freq_arr != np.round(freq_arr)):
            raise ValidationError(
                "freq: must contain non-negative integer values"
            )

    keep = freq_arr > 0
    x_arr, freq_arr = x_arr[keep], freq_arr[keep]
    if x_arr.size == 0:
        raise ValidationError("x: no observations with positive frequency")
    return x_arr, freq_arr


def numerical_hessian(f, theta: NDArray[np.float64], rel_step: float = 1e-4) -> NDArray[np.float64]:
    """Central-difference Hessian of a scalar function."""
    k = len(theta)
    h = rel_step * np.maximum(np.abs(theta), 1.0)
    hess = np.empty((k, k))
    for i in range(k):
        for j in range(i, k):
            ei = np.zeros(k)
            ej = np.zeros(k)
            ei[i] = h[i]
            ej[j] = h[j]
            val = (
                f(theta + ei + ej) - f(theta + ei - ej)
                - f(theta - ei + ej) + f(theta - ei - ej)
            ) / (4.0 * h[i] * h[j])
            hess[i, j] = hess[j, i] = val
    return hess
