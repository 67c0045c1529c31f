"""Index rearrangement for :meth:`GriddedTensor.rearrange_and_copy`.

The list of :class:`~tensorgrid.index_spec.IndexSpec` entries is first
compiled into a :class:`_Plan` that records, for every source index,
how its value is obtained for a given cell of the new tensor:

- from an index of the new tensor (``INDEX``, ``REVERSE``, ``RANGE``),
- from a summation loop variable (``SUM``, ``TRACE``),
- as a constant (``FIXED``),
- or as an interpolation coordinate (``INTERP``, and ``GRID`` where the
  coordinate comes from the new grid).

The plan is then run once per cell of the new tensor. All checks are
made while compiling, before the new tensor is allocated.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from tensorgrid.grid import UniformGrid
from tensorgrid.index_spec import IndexSpec, SpecType
from tensorgrid.tensor_grid import GriddedTensor


@dataclass
class _NewAxis:
    """One index of the new tensor."""

    kind: SpecType
    old: int
    size: int
    start: int = 0
    step: int = 1
    grid: Optional[np.ndarray] = None


@dataclass
class _Plan:
    new_axes: List[_NewAxis] = field(default_factory=list)
    # For each old index: ("new", k), ("sum", s), ("fixed", j),
    # ("interp", val) or ("grid", k).
    roles: list = field(default_factory=list)
    # Extent and old indices driven by each summation loop.
    sum_extents: List[int] = field(default_factory=list)
    sum_axes: List[List[int]] = field(default_factory=list)
    interp_axes: List[int] = field(default_factory=list)

    @property
    def sizes(self) -> List[int]:
        return [a.size for a in self.new_axes]


def _claim(covered: List[bool], ix: int, rank: int, what: str) -> None:
    if ix < 0 or ix >= rank:
        raise ValueError(
            f"Index {ix} in {what} out of range for rank {rank} tensor "
            f"in rearrange_and_copy()."
        )
    if covered[ix]:
        raise ValueError(
            f"Index {ix} specified more than once ({what}) in rearrange_and_copy()."
        )
    covered[ix] = True


def _compile(src: GriddedTensor, spec: Sequence[IndexSpec]) -> _Plan:
    rank = src.rk
    if rank == 0:
        raise ValueError("Cannot rearrange an empty tensor in rearrange_and_copy().")
    covered = [False] * rank
    plan = _Plan(roles=[None] * rank)

    for entry in spec:
        if not isinstance(entry, IndexSpec):
            raise ValueError(
                f"Expected IndexSpec, got {type(entry).__name__} in rearrange_and_copy()."
            )
        t = entry.type
        what = entry.describe()
        old = entry.ix1

        if t is SpecType.TRACE:
            _claim(covered, old, rank, what)
            if entry.ix2 == old:
                raise ValueError(
                    f"Trace of index {old} with itself in rearrange_and_copy()."
                )
            _claim(covered, entry.ix2, rank, what)
            s = len(plan.sum_extents)
            plan.sum_extents.append(min(src.size[old], src.size[entry.ix2]))
            plan.sum_axes.append([old, entry.ix2])
            plan.roles[old] = ("sum", s)
            plan.roles[entry.ix2] = ("sum", s)
            continue

        if t is SpecType.EMPTY or not isinstance(t, SpecType):
            raise ValueError(f"Unsupported index specification {what!r} in rearrange_and_copy().")
        _claim(covered, old, rank, what)
        n = src.size[old]

        if t is SpecType.INDEX:
            plan.roles[old] = ("new", len(plan.new_axes))
            plan.new_axes.append(_NewAxis(t, old, n))
        elif t is SpecType.REVERSE:
            plan.roles[old] = ("new", len(plan.new_axes))
            plan.new_axes.append(_NewAxis(t, old, n, start=n - 1, step=-1))
        elif t is SpecType.RANGE:
            lo, hi = entry.ix2, entry.ix3
            if not (0 <= lo < n and 0 <= hi < n):
                raise ValueError(
                    f"Range ({lo}, {hi}) out of bounds for index {old} of size "
                    f"{n} in rearrange_and_copy()."
                )
            plan.roles[old] = ("new", len(plan.new_axes))
            plan.new_axes.append(_NewAxis(t, old, abs(hi - lo) + 1, start=lo,
                                          step=1 if hi >= lo else -1))
        elif t is SpecType.SUM:
            plan.roles[old] = ("sum", len(plan.sum_extents))
            plan.sum_extents.append(n)
            plan.sum_axes.append([old])
        elif t is SpecType.FIXED:
            if not 0 <= entry.ix2 < n:
                raise ValueError(
                    f"Fixed value {entry.ix2} out of bounds for index {old} of "
                    f"size {n} in rearrange_and_copy()."
                )
            plan.roles[old] = ("fixed", entry.ix2)
        elif t is SpecType.INTERP:
            plan.roles[old] = ("interp", entry.val1)
            plan.interp_axes.append(old)
        elif t is SpecType.GRID:
            ugrid = UniformGrid(entry.val1, entry.val2, entry.ix2, entry.ix3 == 1)
            plan.roles[old] = ("grid", len(plan.new_axes))
            plan.new_axes.append(_NewAxis(t, old, ugrid.get_npoints(),
                                          grid=ugrid.to_array()))
            plan.interp_axes.append(old)

    missing = [i for i in range(rank) if not covered[i]]
    if missing:
        raise ValueError(
            f"Index {missing[0]} not specified in rearrange_and_copy()."
        )
    if not plan.new_axes:
        raise ValueError("New rank is zero in rearrange_and_copy().")
    if plan.interp_axes and not src.is_grid_set():
        raise ValueError(
            "Interpolation requested but grid not set in rearrange_and_copy()."
        )
    return plan


def _output_grid(src: GriddedTensor, plan: _Plan) -> List[np.ndarray]:
    grids = []
    for ax in plan.new_axes:
        if ax.kind is SpecType.GRID:
            grids.append(ax.grid)
        else:
            g = src.copy_grid(ax.old)
            idx = ax.start + ax.step * np.arange(ax.size)
            grids.append(g[idx])
    return grids


def rearrange_and_copy(src: GriddedTensor, spec: Sequence[IndexSpec],
                       verbose: int = 0, err_on_fail: bool = True) -> GriddedTensor:
    """Build a new tensor from *src* according to *spec*.

    See :meth:`GriddedTensor.rearrange_and_copy` for the parameters.
    """
    try:
        plan = _compile(src, spec)
    except ValueError as e:
        if err_on_fail:
            raise
        if verbose > 0:
            print(f"rearrange_and_copy() failed: {e}")
        return GriddedTensor()

    out = GriddedTensor(len(plan.new_axes), plan.sizes, src.itype)
    if src.is_grid_set():
        out.set_grid(_output_grid(src, plan))

    if verbose > 0:
        print(f"Old rank is {src.rk} and new rank is {out.rk}.")
        print(f"Old sizes {src.size}, new sizes {out.size}.")
        if plan.sum_extents:
            print(f"Summing over {len(plan.sum_extents)} loop(s) with extents "
                  f"{plan.sum_extents}.")
    if verbose > 1:
        for i, role in enumerate(plan.roles):
            print(f"  Old index {i}: {role[0]} {role[1]}")
        for k, ax in enumerate(plan.new_axes):
            print(f"  New index {k}: {ax.kind.value} of old index {ax.old}, "
                  f"size {ax.size}")

    ix_old = [0] * src.rk
    interp_vals = [0.0] * len(plan.interp_axes)
    loops = [range(e) for e in plan.sum_extents]

    for n in range(out.total_size()):
        ix_new = out.unpack_index(n)
        for i, (kind, arg) in enumerate(plan.roles):
            if kind == "new":
                ax = plan.new_axes[arg]
                ix_old[i] = ax.start + ax.step * ix_new[arg]
            elif kind == "fixed":
                ix_old[i] = arg
        for m, i in enumerate(plan.interp_axes):
            kind, arg = plan.roles[i]
            interp_vals[m] = arg if kind == "interp" else plan.new_axes[arg].grid[ix_new[arg]]

        total = 0.0
        for combo in itertools.product(*loops):
            for s, axes in enumerate(plan.sum_axes):
                for i in axes:
                    ix_old[i] = combo[s]
            if plan.interp_axes:
                val = src.interp_linear_partial(plan.interp_axes, ix_old, interp_vals)
            else:
                val = src.get(ix_old)
            total += val
            if verbose > 2:
                print(f"    new {ix_new} old {ix_old} value {val:g} sum {total:g}")
        out.data[n] = total

    return out
