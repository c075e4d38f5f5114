"""
Fit a named probability distribution to data.

Public API:
    fitdist(x, distname, ...) -> FitDistSolution
"""

import time
import numpy as np
from numpy.typing import ArrayLike

from statbox.core.exceptions import ValidationError
from statbox.core.result import Result
from statbox.core.validation import (
    check_array,
    check_probability,
    check_vector,
)
from statbox.distributions._common import FitDistParams
from statbox.distributions.registry import canonical_name, get_distribution
from statbox.distributions.solution import FitDistSolution


def fitdist(
    x: ArrayLike,
    distname: str,
    *,
    by: ArrayLike | None = None,
    freq: ArrayLike | None = None,
    alpha: float = 0.05,
) -> FitDistSolution:
    """
    Fit a probability distribution to data.

    Args:
        x: Observations (numeric real vector)
        distname: Registered distribution name, case-insensitive
            (see distribution_names())
        by: Optional grouping variable, same size as x. One distribution
            is fitted per group; groups are sorted.
        freq: Optional non-negative integer frequencies, same size as x
        alpha: Significance level for the parameter confidence intervals

    Returns:
        FitDistSolution. Group fields are None for an ungrouped fit.

    Examples:
        >>> fitdist(x, "rician").distribution.nu
        >>> fitdist(x, "normal", by=sex).by_group()
    """
    t0 = time.perf_counter()

    cls = get_distribution(distname)
    alpha = check_probability(alpha, "alpha")

    x_arr = check_vector(check_array(x, "x"), "x")
    freq_arr = None
    if freq is not None:
        freq_arr = check_vector(check_array(freq, "freq"), "freq")
        if freq_arr.shape != x_arr.shape:
            raise ValidationError(
                f"freq: must have the same size as x ({x_arr.shape}), "
                f"got {freq_arr.shape}"
            )

    if by is None:
        distributions = (cls.fit(x_arr, freq=freq_arr, alpha=alpha),)
        group_names = None
        group_labels = None
    else:
        by_arr = np.asarray(by)
        if by_arr.ndim == 2 and 1 in by_arr.shape:
            by_arr = by_arr.reshape(-1)
        if by_arr.shape != x_arr.shape:
            raise ValidationError(
                f"by: must have the same size as x ({x_arr.shape}), "
                f"got {by_arr.shape}"
            )
        try:
            group_labels, codes = np.unique(by_arr, return_inverse=True)
        except TypeError as e:
            raise ValidationError(f"by: labels must be mutually orderable: {e}") from e
        codes = codes.reshape(-1)
        fitted = []
        for g in range(len(group_labels)):
            mask = codes == g
            fitted.append(cls.fit(
                x_arr[mask],
                freq=None if freq_arr is None else freq_arr[mask],
                alpha=alpha,
            ))
        distributions = tuple(fitted)
        group_names = tuple(str(label) for label in group_labels)

    elapsed = time.perf_counter() - t0

    params = FitDistParams(
        distname=canonical_name(distname),
        distributions=distributions,
        alpha=alpha,
        n_obs=len(x_arr),
        group_names=group_names,
        group_labels=group_labels,
    )
    result = Result(
        params=params,
        info={'grouped': group_names is not None},
        timing={'total_seconds': elapsed},
        backend_name='cpu',
    )
    return FitDistSolution(_result=result)
