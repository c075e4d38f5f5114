"""
Array reductions for descriptive statistics.

Provides median() with dimension selection and explicit NaN policy.
"""

from __future__ import annotations

import warnings
from typing import Literal

import numpy as np
from numpy.typing import ArrayLike, NDArray

from statbox.core.exceptions import ValidationError


OutType = Literal['default', 'double', 'native']
_OUTTYPES = ('default', 'double', 'native')


def median(
    x: ArrayLike,
    axis: int | tuple[int, ...] | None = None,
    *,
    all: bool = False,
    omitnan: bool = False,
    outtype: OutType = 'default',
) -> NDArray | np.floating:
    """
    Median along one or more dimensions.

    Parameters
    ----------
    x : array-like
        Numeric or boolean data of any dimensionality.
    axis : int or tuple of int, optional
        Dimension(s) to reduce. Default: the first dimension whose size
        is not 1 (dimension 0 for scalars). Dimensions beyond x.ndim are
        singletons, so reducing over them leaves x unchanged.
    all : bool
        Reduce over every element. Cannot be combined with axis.
    omitnan : bool
        Ignore NaN values. By default any NaN in a slice makes its median
        NaN. Slices that are empty or all-NaN give NaN.
    outtype : str
        'default' or 'double' return float64; 'native' returns the input
        dtype (integer medians rounded half away from zero).

    Returns
    -------
    ndarray or scalar with the reduced dimensions removed.
    """
    if outtype not in _OUTTYPES:
        raise ValidationError(
            f"outtype must be one of {_OUTTYPES}, got {outtype!r}"
        )

    arr = np.asarray(x)
    if arr.dtype.kind not in 'biuf':
        raise ValidationError(
            f"x: must be numeric or boolean, got dtype {arr.dtype}"
        )
    native_dtype = arr.dtype
    data = arr.astype(np.float64)

    if all:
        if axis is not None:
            raise ValidationError("axis: cannot be combined with all=True")
        data = data.reshape(-1)
        axes: tuple[int, ...] = (0,)
    else:
        axes = _resolve_axes(axis, data)

    if not axes:
        result = data
    else:
        reduce = np.nanmedian if omitnan else np.median
        with warnings.catch_warnings():
            # empty and all-NaN slices are documented to give NaN
            warnings.simplefilter('ignore', RuntimeWarning)
            result = reduce(data, axis=axes if len(axes) > 1 else axes[0])

    if outtype == 'native':
        return _to_native(result, native_dtype)
    return result


def _resolve_axes(axis, data: NDArray) -> tuple[int, ...]:
    """Normalize axis to in-range, non-negative axes; drop singleton extras."""
    if axis is None:
        non_singleton = [d for d, size in enumerate(data.shape) if size != 1]
        if data.ndim == 0:
            return ()
        return (non_singleton[0] if non_singleton else 0,)

    raw = axis if isinstance(axis, tuple) else (axis,)
    resolved = []
    for a in raw:
        if isinstance(a, bool) or not isinstance(a, (int, np.integer)):
            raise ValidationError(f"axis: expected integers, got {axis!r}")
        a = int(a)
        if a < -data.ndim:
            raise ValidationError(
                f"axis: {a} is out of range for {data.ndim}D input"
            )
        if a < 0:
            a += data.ndim
        if a in resolved:
            raise ValidationError(f"axis: duplicate dimension {a} in {axis!r}")
        resolved.append(a)
    return tuple(a for a in resolved if a < data.ndim)


def _to_native(result, dtype: np.dtype):
    values = np.asarray(result)
    if dtype.kind == 'b':
        return values != 0
    if dtype.kind in 'iu':
        if not np.all(np.isfinite(values)):
            return result
        rounded = np.where(values >= 0, np.floor(values + 0.5), np.ceil(values - 0.5))
        return rounded.astype(dtype)
    return values.astype(dtype)
