"""Gridded tensors of fixed rank one to four.

:class:`GriddedTensor1` to :class:`GriddedTensor4` are thin subclasses
of :class:`~tensorgrid.tensor_grid.GriddedTensor` whose sizes, indices
and coordinates are passed as separate positional arguments::

    t = GriddedTensor2(3, 4)
    t.set(1, 2, 5.0)
    t.get(1, 2)
    t.interp_linear(0.5, 1.5)

A single sequence argument is still accepted wherever the base class
takes one, so every inherited method (slicing, Table3D projection,
rearrangement) works unchanged. The rank is fixed: a fixed-rank tensor
is either empty or has exactly ``RANK`` indices.
"""

from __future__ import annotations

from typing import Sequence, Tuple, Union

import numpy as np

from tensorgrid._interp1d import InterpType
from tensorgrid.tensor_grid import GriddedTensor


def _unpack(args: tuple) -> tuple:
    """Accept either ``(a, b, ...)`` or a single sequence ``([a, b, ...],)``."""
    if len(args) == 1 and np.ndim(args[0]) == 1:
        return tuple(args[0])
    return args


class _FixedRankGriddedTensor(GriddedTensor):
    """Base class for the fixed-rank gridded tensors."""

    RANK = 0

    def __init__(self, *sizes: int,
                 interp_type: Union[InterpType, str] = InterpType.LINEAR):
        name = type(self).__name__
        if sizes and len(sizes) != self.RANK:
            raise ValueError(
                f"{name} takes {self.RANK} sizes, got {len(sizes)}."
            )
        super().__init__(self.RANK if sizes else 0, sizes, interp_type)

    @classmethod
    def _new(cls, rank: int, sizes: Sequence[int],
             interp_type: Union[InterpType, str] = InterpType.LINEAR):
        if rank == 0:
            return cls(interp_type=interp_type)
        if rank != cls.RANK:
            raise ValueError(
                f"Cannot create a rank {rank} {cls.__name__}; its rank is {cls.RANK}."
            )
        return cls(*sizes, interp_type=interp_type)

    def resize(self, rank: int, sizes: Sequence[int] = ()) -> None:
        """Resize the tensor, discarding data and grid. The rank may not change."""
        if rank != self.RANK:
            raise ValueError(
                f"Cannot resize a {type(self).__name__} to rank {rank}."
            )
        super().resize(rank, sizes)

    def _index(self, ix: tuple, where: str) -> tuple:
        if len(ix) != self.RANK:
            raise IndexError(
                f"{type(self).__name__}.{where}() takes {self.RANK} indices, "
                f"got {len(ix)}."
            )
        return ix

    def _point(self, x: tuple, where: str) -> Tuple[float, ...]:
        x = _unpack(x)
        if len(x) != self.RANK:
            raise ValueError(
                f"{type(self).__name__}.{where}() takes {self.RANK} coordinates, "
                f"got {len(x)}."
            )
        return tuple(float(v) for v in x)

    def get(self, *ix) -> float:
        """Return the element at the given indices."""
        return super().get(self._index(_unpack(ix), "get"))

    def set(self, *args) -> None:
        """Set an element: ``set(i1, ..., val)`` or ``set([i1, ...], val)``."""
        if len(args) == 2 and np.ndim(args[0]) == 1:
            ix, val = tuple(args[0]), args[1]
        else:
            ix, val = args[:-1], args[-1]
        super().set(self._index(ix, "set"), val)

    def interp(self, *x: float) -> float:
        """Interpolate at ``(x1, ...)`` with the scheme set by :meth:`set_interp_type`."""
        return self.interpolate(self._point(x, "interp"))

    def interp_linear(self, *x: float) -> float:
        """Multilinear interpolation at ``(x1, ...)``."""
        return super().interp_linear(self._point(x, "interp_linear"))


class GriddedTensor1(_FixedRankGriddedTensor):
    """Rank 1 gridded tensor.

    Examples
    --------
    >>> t = GriddedTensor1(3)
    >>> t.set_grid([[0.0, 1.0, 2.0]])
    >>> for i in range(3):
    ...     t.set(i, 2.0 * i)
    >>> t.interp_linear(1.25)
    2.5
    """

    RANK = 1


class GriddedTensor2(_FixedRankGriddedTensor):
    """Rank 2 gridded tensor."""

    RANK = 2


class GriddedTensor3(_FixedRankGriddedTensor):
    """Rank 3 gridded tensor."""

    RANK = 3


class GriddedTensor4(_FixedRankGriddedTensor):
    """Rank 4 gridded tensor."""

    RANK = 4
