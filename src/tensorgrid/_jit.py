"""Numba JIT-compiled kernels for multilinear interpolation.

The hypercube used by linear interpolation is stored as one flat buffer
of ``n_lead * 2**k`` doubles in row-major order: an optional leading
"free" axis of length ``n_lead`` followed by ``k`` axes of length two.
"""

import numpy as np
from numba import njit


@njit(cache=True)
def find_interval(grid: np.ndarray, x: float) -> int:
    """Return ``i`` such that ``x`` lies in ``[grid[i], grid[i+1]]``.

    Works for increasing and decreasing grids. Points outside the grid
    return the first or last interval, so callers extrapolate from the
    boundary. A grid with a single point returns 0.
    """
    n = len(grid)
    if n < 2:
        return 0
    if grid[n - 1] >= grid[0]:
        if x <= grid[0]:
            return 0
        if x >= grid[n - 1]:
            return n - 2
        lo = 0
        hi = n - 1
        while hi - lo > 1:
            mid = (lo + hi) // 2
            if grid[mid] > x:
                hi = mid
            else:
                lo = mid
        return lo
    if x >= grid[0]:
        return 0
    if x <= grid[n - 1]:
        return n - 2
    lo = 0
    hi = n - 1
    while hi - lo > 1:
        mid = (lo + hi) // 2
        if grid[mid] < x:
            hi = mid
        else:
            lo = mid
    return lo


@njit(cache=True)
def extract_hypercube(data: np.ndarray, base: int, n_lead: int, lead_stride: int,
                      strides: np.ndarray, loc: np.ndarray, step: np.ndarray,
                      out: np.ndarray) -> None:
    """Copy the corners of a hypercube from the flat tensor *data* into *out*.

    Parameters
    ----------
    data : ndarray
        Flat row-major tensor data.
    base : int
        Offset contributed by the axes that are held fixed.
    n_lead : int
        Length of the leading free axis (1 when there is none).
    lead_stride : int
        Stride of the leading free axis in *data*.
    strides : ndarray of int64
        Stride in *data* of each interpolated axis.
    loc : ndarray of int64
        Lower corner index along each interpolated axis.
    step : ndarray of int64
        Distance to the upper corner (1, or 0 for axes of size one).
    out : ndarray
        Destination buffer of length at least ``n_lead * 2**k``.
    """
    k = len(strides)
    ncorner = 1 << k
    for lead in range(n_lead):
        off0 = base + lead * lead_stride
        for c in range(ncorner):
            off = off0
            for a in range(k):
                bit = (c >> (k - 1 - a)) & 1
                off += strides[a] * (loc[a] + bit * step[a])
            out[lead * ncorner + c] = data[off]


@njit(cache=True)
def collapse_hypercube(buf: np.ndarray, n_lead: int, fracs: np.ndarray) -> None:
    """Collapse the two-point axes of *buf* in place by linear blending.

    The last axis is removed first: each adjacent pair ``(lo, hi)``
    becomes ``lo + frac * (hi - lo)``. After the call the first
    ``n_lead`` entries of *buf* hold the result.
    """
    k = len(fracs)
    length = n_lead << k
    for a in range(k - 1, -1, -1):
        frac = fracs[a]
        length >>= 1
        for i in range(length):
            lo = buf[2 * i]
            hi = buf[2 * i + 1]
            buf[i] = lo + frac * (hi - lo)
