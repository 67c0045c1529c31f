"""One-dimensional interpolation schemes used by :meth:`GriddedTensor.interpolate`.

The set of schemes is closed; each is selected with an :class:`InterpType`
member and built into an evaluator with :func:`make_interp`.
"""

from __future__ import annotations

import enum
from typing import Callable

import numpy as np
from scipy.interpolate import (
    Akima1DInterpolator,
    CubicSpline,
    PchipInterpolator,
    make_interp_spline,
)


class InterpType(enum.Enum):
    """Available 1-D interpolation schemes."""

    LINEAR = "linear"
    CUBIC = "cubic"
    AKIMA = "akima"
    MONOTONE = "monotone"

    @property
    def min_size(self) -> int:
        """Smallest number of points the scheme accepts."""
        return _MIN_SIZE[self]


_MIN_SIZE = {
    InterpType.LINEAR: 2,
    InterpType.CUBIC: 3,
    InterpType.AKIMA: 5,
    InterpType.MONOTONE: 2,
}


def as_interp_type(itype) -> InterpType:
    """Coerce *itype* (member, value string or name) to :class:`InterpType`."""
    if isinstance(itype, InterpType):
        return itype
    if isinstance(itype, str):
        try:
            return InterpType(itype.lower())
        except ValueError:
            pass
    raise ValueError(
        f"Unknown interpolation type {itype!r}; "
        f"use one of {[t.value for t in InterpType]}"
    )


def make_interp(itype: InterpType, x: np.ndarray, y: np.ndarray) -> Callable[[float], float]:
    """Build a 1-D evaluator ``f(x0) -> float`` through the points ``(x, y)``.

    All schemes extrapolate beyond the ends of *x*. Decreasing *x* is
    accepted and handled by reversing both arrays.

    Parameters
    ----------
    itype : InterpType
        Interpolation scheme.
    x : ndarray
        Strictly monotonic abscissae.
    y : ndarray
        Ordinates, same length as *x*.

    Raises
    ------
    ValueError
        If the lengths differ or there are fewer points than the scheme needs.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if len(x) != len(y):
        raise ValueError(f"x has length {len(x)} but y has length {len(y)}")
    if len(x) < itype.min_size:
        raise ValueError(
            f"Interpolation type '{itype.value}' needs at least "
            f"{itype.min_size} points, got {len(x)}"
        )
    if len(x) > 1 and x[-1] < x[0]:
        x = x[::-1]
        y = y[::-1]

    if itype is InterpType.LINEAR:
        spl = make_interp_spline(x, y, k=1)
        return lambda x0: float(spl(x0))
    if itype is InterpType.CUBIC:
        spl = CubicSpline(x, y, bc_type="natural", extrapolate=True)
        return lambda x0: float(spl(x0))
    if itype is InterpType.AKIMA:
        akima = Akima1DInterpolator(x, y)
        return lambda x0: float(akima(x0, extrapolate=True))
    pchip = PchipInterpolator(x, y, extrapolate=True)
    return lambda x0: float(pchip(x0))
