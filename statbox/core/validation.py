"""
Input validation utilities for statbox.

Validators fail fast: they raise with the offending parameter name and
the actual value instead of repairing input. Each one checks one thing.
"""

from numbers import Real
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from statbox.core.exceptions import ValidationError, DimensionError


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Convert an array-like to a real floating-point numpy array.

    Integer and boolean input is promoted to float64; float32 is kept.

    Raises:
        ValidationError: If the input is ragged, non-numeric or complex
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )
    if result.dtype.kind == 'c':
        raise ValidationError(f"{name}: complex values are not supported")
    if result.dtype.kind not in 'biuf':
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    if result.dtype.kind != 'f':
        result = result.astype(np.float64)
    return result


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Raises:
        ValidationError: If the array holds NaN or Inf, with their counts
    """
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise ValidationError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_vector(array: NDArray, name: str) -> NDArray:
    """
    Return a vector as 1D.

    Single-row and single-column matrices count as vectors.

    Raises:
        DimensionError: For scalars and genuine matrices or higher-rank arrays
    """
    if array.ndim == 1:
        return array
    if array.ndim == 2 and 1 in array.shape:
        return array.reshape(-1)
    raise DimensionError(
        f"{name}: expected a vector, got {array.ndim}D with shape {array.shape}"
    )


def check_consistent_length(
    *arrays: NDArray,
    names: tuple[str, ...]
) -> None:
    """
    Require every array to have the same first dimension.

    Raises:
        ValueError: If names and arrays don't pair up
        DimensionError: If lengths differ, listing each one
    """
    if len(arrays) != len(names):
        raise ValueError(
            f"Number of arrays ({len(arrays)}) must match number of names ({len(names)})"
        )

    lengths = [arr.shape[0] for arr in arrays]
    if len(set(lengths)) > 1:
        details = ", ".join(f"{name}={length}" for name, length in zip(names, lengths))
        raise DimensionError(f"Inconsistent lengths: {details}")


def check_min_samples(array: NDArray, min_samples: int, name: str) -> None:
    """
    Raises:
        ValidationError: If the first dimension is shorter than min_samples
    """
    n = array.shape[0]
    if n < min_samples:
        raise ValidationError(
            f"{name}: requires at least {min_samples} samples, got {n}"
        )


def check_probability(value: Any, name: str) -> float:
    """
    Return a significance or confidence level as a float in (0, 1).

    Raises:
        ValidationError: If value is not a real scalar strictly inside (0, 1)
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValidationError(f"{name}: expected a real scalar, got {value!r}")
    value = float(value)
    if not 0.0 < value < 1.0:
        raise ValidationError(f"{name}: must be in (0, 1), got {value}")
    return value
