"""Shared helpers for gridded-tensor interpolation.

Linear interpolation works on the ``2**k`` hypercube of grid points that
brackets the requested point along every interpolated axis. The corners
are copied into a scratch buffer allocated by each call, so concurrent
readers of one tensor never share state, and collapsed one axis at a
time (last axis first) by the kernels in :mod:`tensorgrid._jit`.

References
----------
- Press et al. (2007), "Numerical Recipes", 3rd ed., Section 3.6,
  "Interpolation on a Grid in Multidimensions".
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np

from tensorgrid._interp1d import InterpType, make_interp
from tensorgrid._jit import collapse_hypercube, extract_hypercube, find_interval


def _row_major_strides(sizes: Sequence[int]) -> List[int]:
    strides = [1] * len(sizes)
    for i in range(len(sizes) - 2, -1, -1):
        strides[i] = strides[i + 1] * sizes[i + 1]
    return strides


def _bracket(grid: np.ndarray, x: float) -> Tuple[int, int, float]:
    """Return ``(loc, step, frac)`` for linear interpolation of *x* on *grid*.

    Axes with a single point are not interpolated: the step to the upper
    corner is zero and the fraction is zero.
    """
    if len(grid) == 1:
        return 0, 0, 0.0
    loc = int(find_interval(grid, float(x)))
    g_lo = grid[loc]
    g_hi = grid[loc + 1]
    if g_hi == g_lo:
        return loc, 1, 0.0
    return loc, 1, (float(x) - g_lo) / (g_hi - g_lo)


def linear_hypercube(tensor, axes: Sequence[int], vals: Sequence[float],
                     fixed: Optional[Sequence[int]] = None,
                     free_axis: Optional[int] = None) -> np.ndarray:
    """Multilinear interpolation of *tensor* along *axes* at *vals*.

    Parameters
    ----------
    tensor : GriddedTensor
        Source tensor; its grid must be set.
    axes : sequence of int
        Axes to interpolate, in the order the hypercube is built.
    vals : sequence of float
        Target coordinate for each entry of *axes*.
    fixed : sequence of int, optional
        Full-rank index list supplying the index of every axis that is
        neither interpolated nor free. Entries for other axes are ignored.
    free_axis : int, optional
        Axis left free; the result then has one entry per grid point of
        this axis.

    Returns
    -------
    ndarray
        Array of length ``size[free_axis]`` (or 1 if there is no free axis).
    """
    sizes = tensor.size
    strides = _row_major_strides(sizes)
    interp_set = set(axes)

    base = 0
    for i in range(tensor.rk):
        if i in interp_set or i == free_axis:
            continue
        base += strides[i] * int(fixed[i])

    k = len(axes)
    ax_strides = np.empty(k, dtype=np.int64)
    loc = np.empty(k, dtype=np.int64)
    step = np.empty(k, dtype=np.int64)
    fracs = np.empty(k)
    for a in range(k):
        ax = axes[a]
        ax_strides[a] = strides[ax]
        loc[a], step[a], fracs[a] = _bracket(tensor.copy_grid(ax), vals[a])

    if free_axis is None:
        n_lead, lead_stride = 1, 0
    else:
        n_lead, lead_stride = sizes[free_axis], strides[free_axis]

    buf = np.empty(n_lead << k)
    extract_hypercube(tensor.data, base, n_lead, lead_stride,
                      ax_strides, loc, step, buf)
    collapse_hypercube(buf, n_lead, fracs)
    return buf[:n_lead]


def interpolate_recursive(values: np.ndarray, grids: List[np.ndarray],
                          point: Sequence[float], itype: InterpType) -> float:
    """Interpolate an N-d array by collapsing axis 0 with a 1-D scheme.

    For every combination of the remaining indices a 1-D interpolator is
    built along axis 0 and evaluated at ``point[0]``; the resulting
    rank-(N-1) array is interpolated recursively at ``point[1:]``.
    """
    if values.ndim == 1:
        return make_interp(itype, grids[0], values)(point[0])

    rest = values.shape[1:]
    reduced = np.empty(rest)
    for idx in np.ndindex(*rest):
        y = values[(slice(None),) + idx]
        reduced[idx] = make_interp(itype, grids[0], y)(point[0])
    return interpolate_recursive(reduced, grids[1:], point[1:], itype)
