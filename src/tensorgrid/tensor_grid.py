"""Tensors defined on an N-dimensional grid.

This module implements :class:`GriddedTensor`, a :class:`~tensorgrid.tensor.Tensor`
whose indices are mapped to numerical coordinates. The coordinates for
all axes are stored in one packed vector: the first ``size[0]`` entries
are the grid of axis 0, the next ``size[1]`` the grid of axis 1, and so
on. By convention, methods ending in ``_val`` work with the grid point
closest to a user-specified coordinate.

Beyond element access, a gridded tensor can be interpolated (linearly
or with a 1-D scheme applied recursively), projected onto a
:class:`~tensorgrid.table3d.Table3D`, sliced, and rearranged into a new
tensor with :meth:`GriddedTensor.rearrange_and_copy`.
"""

from __future__ import annotations

import os
import pickle
import warnings
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from tensorgrid._interp import interpolate_recursive, linear_hypercube
from tensorgrid._interp1d import InterpType, as_interp_type
from tensorgrid.grid import UniformGrid, evaluate_grid_formula
from tensorgrid.tensor import Tensor, TensorSanityError


class GriddedTensor(Tensor):
    """Tensor with a numerical grid for every index.

    Parameters
    ----------
    rank : int, optional
        Number of indices. Default is 0 (empty tensor).
    sizes : sequence of int, optional
        Size of each index. All sizes must be positive.
    interp_type : InterpType or str, optional
        1-D scheme used by :meth:`interpolate`. Default is linear.

    Raises
    ------
    ValueError
        If any requested size is zero.

    Notes
    -----
    The grid is not set by the constructor. Use :meth:`set_grid`,
    :meth:`set_grid_packed` or :meth:`default_grid` before calling any
    method that needs coordinates.

    Examples
    --------
    >>> t = GriddedTensor(2, [3, 3])
    >>> t.set_grid([[0.0, 1.0, 2.0], [0.0, 1.0, 2.0]])
    >>> for i in range(3):
    ...     for j in range(3):
    ...         t.set([i, j], i + j)
    >>> t.interp_linear([0.5, 0.5])
    1.0
    >>> t.get_val([1.4, 0.6])
    2.0
    """

    def __init__(self, rank: int = 0, sizes: Sequence[int] = (),
                 interp_type: Union[InterpType, str] = InterpType.LINEAR):
        super().__init__(rank, sizes)
        self.grid: np.ndarray = np.zeros(0)
        self.grid_set: bool = False
        self.itype: InterpType = as_interp_type(interp_type)

    @classmethod
    def _new(cls, rank: int, sizes: Sequence[int],
             interp_type: Union[InterpType, str] = InterpType.LINEAR) -> "GriddedTensor":
        return cls(rank, sizes, interp_type)

    @classmethod
    def from_uniform_grids(cls, grids: Sequence[UniformGrid]) -> "GriddedTensor":
        """Create a tensor whose sizes and grid come from *grids*."""
        if len(grids) == 0:
            raise ValueError("At least one UniformGrid is required.")
        obj = cls._new(len(grids), [g.get_npoints() for g in grids])
        obj.set_grid(grids)
        return obj

    @classmethod
    def from_values(cls, values, grid: Optional[Sequence] = None,
                    interp_type: Union[InterpType, str] = InterpType.LINEAR
                    ) -> "GriddedTensor":
        """Create a tensor from an N-d array and optional per-axis grids.

        Parameters
        ----------
        values : array_like
            Tensor values; the array shape gives the tensor sizes.
        grid : sequence of array_like or UniformGrid, optional
            One coordinate vector per axis. If omitted the grid is left unset.
        interp_type : InterpType or str, optional
            1-D scheme used by :meth:`interpolate`.
        """
        values = np.asarray(values, dtype=float)
        if values.ndim == 0:
            raise ValueError("values must have at least one dimension")
        obj = cls._new(values.ndim, values.shape, interp_type)
        obj.data[:] = values.ravel()
        if grid is not None:
            obj.set_grid(grid)
        return obj

    def copy(self) -> "GriddedTensor":
        """Return an independent copy of the tensor and its grid."""
        obj = self._new(self.rk, self.size, self.itype)
        obj.data[:] = self.data
        if self.grid_set:
            obj.grid = self.grid.copy()
            obj.grid_set = True
        return obj

    # ------------------------------------------------------------------
    # Validity
    # ------------------------------------------------------------------

    def is_valid(self) -> None:
        """Check that the grid is consistent with the tensor sizes.

        Raises
        ------
        TensorSanityError
            If the grid is set but its length differs from ``sum(size)``,
            or the grid is unset but not empty.
        """
        super().is_valid()
        if self.rk > 0 and self.grid_set and len(self.grid) != sum(self.size):
            raise TensorSanityError(
                f"Value grid_set is true but grid vector has length "
                f"{len(self.grid)} instead of {sum(self.size)} in "
                f"GriddedTensor.is_valid()."
            )
        if not self.grid_set and len(self.grid) > 0:
            raise TensorSanityError(
                f"Value grid_set is false but grid vector has length "
                f"{len(self.grid)} in GriddedTensor.is_valid()."
            )

    def _check_axis(self, i: int, where: str) -> None:
        if i < 0 or i >= self.rk:
            raise ValueError(
                f"Index {i} greater than or equal to rank, {self.rk}, "
                f"in GriddedTensor.{where}()."
            )

    def _check_grid(self, where: str) -> None:
        if not self.grid_set:
            raise RuntimeError(
                f"Grid not set in GriddedTensor.{where}(). "
                f"Call set_grid() or default_grid() first."
            )

    def _check_nonempty(self, where: str) -> None:
        if self.rk == 0:
            raise ValueError(
                f"Tried to set grid for empty tensor in GriddedTensor.{where}()."
            )

    def _grid_offset(self, i: int) -> int:
        return sum(self.size[:i])

    # ------------------------------------------------------------------
    # Resizing
    # ------------------------------------------------------------------

    def resize(self, rank: int, sizes: Sequence[int] = ()) -> None:
        """Resize the tensor, discarding data and grid.

        The sizes are checked first; if any is zero a ``ValueError`` is
        raised and neither the data nor the grid is changed.
        """
        super().resize(rank, sizes)
        self.grid = np.zeros(0)
        self.grid_set = False

    def clear(self) -> None:
        """Reset to the empty rank-0 tensor, freeing data and grid."""
        super().clear()
        self.grid = np.zeros(0)
        self.grid_set = False

    # ------------------------------------------------------------------
    # Grid manipulation
    # ------------------------------------------------------------------

    def is_grid_set(self) -> bool:
        return self.grid_set

    def set_grid_packed(self, grid_vec: Sequence[float]) -> None:
        """Set the grid for all axes from one packed vector.

        The first ``size[0]`` entries are the grid for axis 0, the next
        ``size[1]`` the grid for axis 1, and so on. The values are copied.
        """
        self._check_nonempty("set_grid_packed")
        grid_vec = np.asarray(grid_vec, dtype=float).ravel()
        ngrid = sum(self.size)
        if len(grid_vec) != ngrid:
            raise ValueError(
                f"Packed grid has length {len(grid_vec)} but sizes {self.size} "
                f"require {ngrid} in GriddedTensor.set_grid_packed()."
            )
        self.grid = grid_vec.copy()
        self.grid_set = True

    def set_grid(self, grid_vecs: Sequence) -> None:
        """Set the grid from one coordinate vector per axis.

        Each entry of *grid_vecs* may be an array-like of length
        ``size[i]`` or a :class:`~tensorgrid.grid.UniformGrid` with
        ``size[i]`` points.
        """
        self._check_nonempty("set_grid")
        if len(grid_vecs) != self.rk:
            raise ValueError(
                f"Got {len(grid_vecs)} grid vectors for a rank {self.rk} "
                f"tensor in GriddedTensor.set_grid()."
            )
        parts = []
        for i, g in enumerate(grid_vecs):
            arr = g.to_array() if isinstance(g, UniformGrid) else np.asarray(g, dtype=float).ravel()
            if len(arr) != self.size[i]:
                raise ValueError(
                    f"Grid for index {i} has {len(arr)} points but size is "
                    f"{self.size[i]} in GriddedTensor.set_grid()."
                )
            parts.append(arr)
        self.grid = np.concatenate(parts)
        self.grid_set = True

    def default_grid(self) -> None:
        """Use the index itself as the coordinate: ``grid[i][j] = j``."""
        self._check_nonempty("default_grid")
        self.grid = np.concatenate([np.arange(n, dtype=float) for n in self.size])
        self.grid_set = True

    def set_grid_i_vec(self, i: int, grid_vec: Sequence[float]) -> None:
        """Replace the grid of axis *i* by *grid_vec*."""
        self._check_nonempty("set_grid_i_vec")
        self._check_grid("set_grid_i_vec")
        self._check_axis(i, "set_grid_i_vec")
        grid_vec = np.asarray(grid_vec, dtype=float).ravel()
        if len(grid_vec) != self.size[i]:
            raise ValueError(
                f"Grid for index {i} has {len(grid_vec)} points but size is "
                f"{self.size[i]} in GriddedTensor.set_grid_i_vec()."
            )
        off = self._grid_offset(i)
        self.grid[off:off + self.size[i]] = grid_vec

    def set_grid_i_func(self, i: int, func: str) -> None:
        """Replace the grid of axis *i* using a formula in the variable ``i``.

        Examples
        --------
        >>> t = GriddedTensor(1, [4])
        >>> t.default_grid()
        >>> t.set_grid_i_func(0, "2^i")
        >>> t.copy_grid(0).tolist()
        [1.0, 2.0, 4.0, 8.0]

        The formula is evaluated at every point before the grid is written,
        so a point that fails leaves the grid unchanged.
        """
        self._check_nonempty("set_grid_i_func")
        self._check_grid("set_grid_i_func")
        self._check_axis(i, "set_grid_i_func")
        vec = np.array([evaluate_grid_formula(func, {"i": float(j)})
                        for j in range(self.size[i])])
        off = self._grid_offset(i)
        self.grid[off:off + self.size[i]] = vec

    def copy_grid(self, i: int) -> np.ndarray:
        """Return a copy of the grid for axis *i*."""
        self._check_grid("copy_grid")
        self._check_axis(i, "copy_grid")
        off = self._grid_offset(i)
        return self.grid[off:off + self.size[i]].copy()

    def get_grid_packed(self) -> np.ndarray:
        """Return a copy of the packed grid."""
        self._check_grid("get_grid_packed")
        return self.grid.copy()

    def get_grid(self, i: int, j: int) -> float:
        """Return the *j*-th grid point of axis *i*."""
        self._check_grid("get_grid")
        self._check_axis(i, "get_grid")
        if j < 0 or j >= self.size[i]:
            raise IndexError(
                f"Grid point {j} out of range [0, {self.size[i] - 1}] for "
                f"index {i} in GriddedTensor.get_grid()."
            )
        return float(self.grid[self._grid_offset(i) + j])

    def set_grid_value(self, i: int, j: int, val: float) -> None:
        """Set the *j*-th grid point of axis *i* to *val*."""
        self._check_grid("set_grid_value")
        self._check_axis(i, "set_grid_value")
        if j < 0 or j >= self.size[i]:
            raise IndexError(
                f"Grid point {j} out of range [0, {self.size[i] - 1}] for "
                f"index {i} in GriddedTensor.set_grid_value()."
            )
        self.grid[self._grid_offset(i) + j] = val

    # ------------------------------------------------------------------
    # Grid lookup
    # ------------------------------------------------------------------

    def lookup_grid_packed_val(self, i: int, val: float) -> Tuple[int, float]:
        """Return the packed-grid position and value of the point on axis
        *i* closest to *val*.

        Ties keep the first (lowest-index) point.
        """
        self._check_axis(i, "lookup_grid_packed_val")
        self._check_grid("lookup_grid_packed_val")
        off = self._grid_offset(i)
        seg = self.grid[off:off + self.size[i]]
        best = int(np.argmin(np.abs(seg - val)))
        return off + best, float(seg[best])

    def lookup_grid_packed(self, i: int, val: float) -> int:
        return self.lookup_grid_packed_val(i, val)[0]

    def lookup_grid_val(self, i: int, val: float) -> Tuple[int, float]:
        """Return the index and coordinate of the grid point on axis *i*
        closest to *val*.

        Points beyond either end of the grid map to the nearest boundary
        point. Ties keep the first (lowest-index) point.
        """
        packed, closest = self.lookup_grid_packed_val(i, val)
        return packed - self._grid_offset(i), closest

    def lookup_grid(self, i: int, val: float) -> int:
        """Return the index of the grid point on axis *i* closest to *val*."""
        return self.lookup_grid_val(i, val)[0]

    def lookup_grid_vec(self, vals: Sequence[float]) -> List[int]:
        """Return the closest grid index on every axis."""
        if len(vals) < self.rk:
            raise ValueError(
                f"Got {len(vals)} values for a rank {self.rk} tensor in "
                f"GriddedTensor.lookup_grid_vec()."
            )
        return [self.lookup_grid(i, vals[i]) for i in range(self.rk)]

    # ------------------------------------------------------------------
    # Access by grid point
    # ------------------------------------------------------------------

    def get_val(self, point: Sequence[float], return_closest: bool = False):
        """Return the element at the grid point closest to *point*.

        Parameters
        ----------
        point : sequence of float
            One coordinate per axis.
        return_closest : bool, optional
            If True, also return the coordinates of the grid point used.

        Returns
        -------
        float or (float, list of float)
        """
        if len(point) < self.rk:
            raise ValueError(
                f"Got {len(point)} coordinates for a rank {self.rk} tensor "
                f"in GriddedTensor.get_val()."
            )
        index, closest = [], []
        for i in range(self.rk):
            ix, g = self.lookup_grid_val(i, point[i])
            index.append(ix)
            closest.append(g)
        val = self.get(index)
        if return_closest:
            return val, closest
        return val

    def set_val(self, point: Sequence[float], val: float,
                return_closest: bool = False) -> Optional[List[float]]:
        """Set the element at the grid point closest to *point* to *val*.

        If *return_closest* is True the coordinates of the grid point that
        was modified are returned.
        """
        if len(point) < self.rk:
            raise ValueError(
                f"Got {len(point)} coordinates for a rank {self.rk} tensor "
                f"in GriddedTensor.set_val()."
            )
        index, closest = [], []
        for i in range(self.rk):
            ix, g = self.lookup_grid_val(i, point[i])
            index.append(ix)
            closest.append(g)
        self.set(index, val)
        if return_closest:
            return closest
        return None

    # ------------------------------------------------------------------
    # Interpolation
    # ------------------------------------------------------------------

    def set_interp_type(self, interp_type: Union[InterpType, str]) -> None:
        """Select the 1-D scheme used by :meth:`interpolate`."""
        self.itype = as_interp_type(interp_type)

    def interpolate(self, vals: Sequence[float]) -> float:
        """Interpolate at *vals* by recursive application of a 1-D scheme.

        The scheme is the one chosen with :meth:`set_interp_type`. At
        each level one interpolator is built for every combination of the
        remaining indices, so this is only practical for small grids.
        Use :meth:`interp_linear` for large tensors.
        """
        self._check_grid("interpolate")
        if self.rk == 0:
            raise ValueError("Cannot interpolate an empty tensor.")
        if len(vals) < self.rk:
            raise ValueError(
                f"Got {len(vals)} coordinates for a rank {self.rk} tensor "
                f"in GriddedTensor.interpolate()."
            )
        grids = [self.copy_grid(i) for i in range(self.rk)]
        return interpolate_recursive(self.to_array(), grids,
                                     [float(v) for v in vals[:self.rk]], self.itype)

    def interp_linear(self, v: Sequence[float]) -> float:
        """Multilinear interpolation (or extrapolation) at the point *v*.

        For each axis the grid interval containing (or closest to) ``v[i]``
        is found, the ``2**rank`` hypercube of surrounding points is
        extracted, and the hypercube is collapsed one axis at a time.
        """
        self._check_grid("interp_linear")
        if self.rk == 0:
            raise ValueError("Cannot interpolate an empty tensor.")
        if len(v) < self.rk:
            raise ValueError(
                f"Got {len(v)} coordinates for a rank {self.rk} tensor "
                f"in GriddedTensor.interp_linear()."
            )
        return float(linear_hypercube(self, list(range(self.rk)), v)[0])

    def interp_linear_partial(self, ix_to_interp: Sequence[int],
                              ix: Sequence[int], val: Sequence[float]) -> float:
        """Interpolate some indices and look up the others.

        Parameters
        ----------
        ix_to_interp : sequence of int
            Indices to interpolate (at least one, at most the rank).
        ix : sequence of int
            Full-rank index list; entries for interpolated indices are ignored.
        val : sequence of float
            Coordinate for each entry of *ix_to_interp*.
        """
        if len(val) != len(ix_to_interp):
            raise ValueError(
                f"Index list has length {len(ix_to_interp)} but value list has "
                f"length {len(val)} in GriddedTensor.interp_linear_partial()."
            )
        if len(ix_to_interp) == 0 or len(ix_to_interp) > self.rk:
            raise ValueError(
                f"Index list of length {len(ix_to_interp)} too large or too "
                f"small for rank {self.rk} in GriddedTensor.interp_linear_partial()."
            )
        if len(set(ix_to_interp)) != len(ix_to_interp):
            raise ValueError(
                f"Repeated index in {list(ix_to_interp)} in "
                f"GriddedTensor.interp_linear_partial()."
            )
        for i in ix_to_interp:
            self._check_axis(i, "interp_linear_partial")
        if len(ix) < self.rk:
            raise ValueError(
                f"Index vector has length {len(ix)} but rank is {self.rk} "
                f"in GriddedTensor.interp_linear_partial()."
            )
        self._check_grid("interp_linear_partial")
        for i in range(self.rk):
            if i not in ix_to_interp and not 0 <= ix[i] < self.size[i]:
                raise IndexError(
                    f"Value {ix[i]} of index {i} out of range "
                    f"[0, {self.size[i] - 1}] in GriddedTensor.interp_linear_partial()."
                )
        return float(linear_hypercube(self, list(ix_to_interp), val, fixed=ix)[0])

    def interp_linear_vec(self, v: Sequence[float], ifree: int) -> np.ndarray:
        """Interpolate all indices except *ifree*, returning a vector.

        The result has one entry for each grid point of index *ifree*;
        ``v[ifree]`` is ignored.
        """
        self._check_grid("interp_linear_vec")
        self._check_axis(ifree, "interp_linear_vec")
        if len(v) < self.rk:
            raise ValueError(
                f"Got {len(v)} coordinates for a rank {self.rk} tensor "
                f"in GriddedTensor.interp_linear_vec()."
            )
        axes = [i for i in range(self.rk) if i != ifree]
        return linear_hypercube(self, axes, [v[i] for i in axes], free_axis=ifree)

    def interp_linear_vec0(self, v: Sequence[float]) -> np.ndarray:
        """Interpolate indices ``1..rank-1`` leaving index 0 free."""
        return self.interp_linear_vec(v, 0)

    # ------------------------------------------------------------------
    # Slicing
    # ------------------------------------------------------------------

    def copy_slice_interp(self, ifix: Sequence[int],
                          vals: Sequence[float]) -> "GriddedTensor":
        """Fix one or more indices at coordinates *vals* by interpolation.

        Returns a new tensor whose indices are the unfixed indices of this
        tensor, in order, with the same grids.
        """
        if self.rk < 1 + len(ifix):
            raise ValueError(
                f"Fixed {len(ifix)} indices of a rank {self.rk} tensor in "
                f"GriddedTensor.copy_slice_interp()."
            )
        if len(ifix) != len(vals):
            raise ValueError(
                f"Mismatch between {len(ifix)} indices and {len(vals)} values "
                f"in GriddedTensor.copy_slice_interp()."
            )
        for i in ifix:
            self._check_axis(i, "copy_slice_interp")
        if len(set(ifix)) != len(ifix):
            raise ValueError(
                f"Repeated index in {list(ifix)} in GriddedTensor.copy_slice_interp()."
            )
        self._check_grid("copy_slice_interp")

        fixed = dict(zip(ifix, vals))
        kept = [i for i in range(self.rk) if i not in fixed]
        tg_new = GriddedTensor(len(kept), [self.size[i] for i in kept], self.itype)
        tg_new.set_grid([self.copy_grid(i) for i in kept])

        point = np.zeros(self.rk)
        for i, j in fixed.items():
            point[i] = j
        for n in range(tg_new.total_size()):
            ix_new = tg_new.unpack_index(n)
            for k, i in enumerate(kept):
                point[i] = tg_new.get_grid(k, ix_new[k])
            tg_new.data[n] = self.interp_linear(point)
        return tg_new

    # ------------------------------------------------------------------
    # Conversion to Table3D
    # ------------------------------------------------------------------

    def _check_xy(self, ix_x: int, ix_y: int, where: str) -> None:
        if ix_x >= self.rk or ix_y >= self.rk or ix_x < 0 or ix_y < 0 or ix_x == ix_y:
            raise ValueError(
                f"Either indices ({ix_x}, {ix_y}) greater than rank {self.rk} "
                f"or x and y indices equal in GriddedTensor.{where}()."
            )

    def _plane(self, ix_x: int, ix_y: int, index: Sequence[int]) -> np.ndarray:
        """Return the (size[ix_x], size[ix_y]) slice through *index*."""
        if len(index) < self.rk:
            raise ValueError(
                f"Index vector has length {len(index)} but rank is {self.rk}."
            )
        sel = []
        for i in range(self.rk):
            if i in (ix_x, ix_y):
                sel.append(slice(None))
            else:
                j = int(index[i])
                if not 0 <= j < self.size[i]:
                    raise IndexError(
                        f"Value {j} of index {i} out of range [0, {self.size[i] - 1}]."
                    )
                sel.append(j)
        plane = self.to_array()[tuple(sel)]
        return plane.T if ix_x > ix_y else plane

    def _set_table_xy(self, ix_x: int, ix_y: int, tab, x_name: str, y_name: str) -> None:
        nx, ny = tab.get_size()
        if nx == 0 and ny == 0:
            tab.set_xy(x_name or "x", self.copy_grid(ix_x),
                       y_name or "y", self.copy_grid(ix_y))

    def copy_table3d_align(self, ix_x: int, ix_y: int, index: Sequence[int],
                           tab, slice_name: str = "z") -> None:
        """Copy a 2-D slice to *tab*, whose grid must already match in size.

        Indices other than *ix_x* and *ix_y* are fixed at the values in
        *index*. The grids themselves are not compared, only the sizes.
        """
        self._check_xy(ix_x, ix_y, "copy_table3d_align")
        nx, ny = tab.get_size()
        if nx != self.size[ix_x] or ny != self.size[ix_y]:
            raise ValueError(
                f"Grids not commensurate in GriddedTensor.copy_table3d_align(): "
                f"table is ({nx}, {ny}) but tensor indices have sizes "
                f"({self.size[ix_x]}, {self.size[ix_y]})."
            )
        plane = self._plane(ix_x, ix_y, index)
        if not tab.is_slice(slice_name):
            tab.new_slice(slice_name)
        tab.get_slice(slice_name)[:, :] = plane

    def copy_table3d_align_setxy(self, ix_x: int, ix_y: int, index: Sequence[int],
                                 tab, x_name: str = "x", y_name: str = "y",
                                 slice_name: str = "z") -> None:
        """Like :meth:`copy_table3d_align`, first copying the tensor grid to
        *tab* if the table has no grid yet."""
        self._check_xy(ix_x, ix_y, "copy_table3d_align_setxy")
        self._set_table_xy(ix_x, ix_y, tab, x_name, y_name)
        self.copy_table3d_align(ix_x, ix_y, index, tab, slice_name)

    def copy_table3d_interp(self, ix_x: int, ix_y: int, index: Sequence[int],
                            tab, slice_name: str = "z") -> None:
        """Fill a slice of *tab* by linear interpolation on the table grid.

        Indices other than *ix_x* and *ix_y* are fixed at the grid points
        given by *index*. If the table has no grid the tensor grid is
        copied and the aligned path is used instead.
        """
        self._check_xy(ix_x, ix_y, "copy_table3d_interp")
        nx, ny = tab.get_size()
        if nx == 0 and ny == 0:
            self.copy_table3d_align_setxy(ix_x, ix_y, index, tab,
                                          slice_name=slice_name)
            return
        if len(index) < self.rk:
            raise ValueError(
                f"Index vector has length {len(index)} but rank is {self.rk} "
                f"in GriddedTensor.copy_table3d_interp()."
            )
        vals = [0.0] * self.rk
        for i in range(self.rk):
            if i != ix_x and i != ix_y:
                vals[i] = self.get_grid(i, int(index[i]))
        self._fill_table_interp(ix_x, ix_y, vals, tab, slice_name, 0)

    def copy_table3d_interp_values(self, ix_x: int, ix_y: int,
                                   values: Sequence[float], tab,
                                   slice_name: str = "z", verbose: int = 0) -> None:
        """Fill a slice of *tab* by linear interpolation, fixing the other
        indices at the coordinates in *values*.

        The entries ``values[ix_x]`` and ``values[ix_y]`` are ignored.
        """
        self._check_xy(ix_x, ix_y, "copy_table3d_interp_values")
        if len(values) != self.rk:
            raise ValueError(
                f"Values array has length {len(values)} but rank is {self.rk} "
                f"in GriddedTensor.copy_table3d_interp_values()."
            )
        if not tab.is_xy_set():
            raise RuntimeError(
                "Grid not set in table passed to "
                "GriddedTensor.copy_table3d_interp_values()."
            )
        self._fill_table_interp(ix_x, ix_y, list(values), tab, slice_name, verbose)

    def copy_table3d_interp_values_setxy(self, ix_x: int, ix_y: int,
                                         values: Sequence[float], tab,
                                         x_name: str = "x", y_name: str = "y",
                                         slice_name: str = "z") -> None:
        """Like :meth:`copy_table3d_interp_values`, first copying the tensor
        grid to *tab* if the table has no grid yet."""
        self._check_xy(ix_x, ix_y, "copy_table3d_interp_values_setxy")
        self._set_table_xy(ix_x, ix_y, tab, x_name, y_name)
        self.copy_table3d_interp_values(ix_x, ix_y, values, tab, slice_name)

    def _fill_table_interp(self, ix_x, ix_y, vals, tab, slice_name, verbose):
        nx, ny = tab.get_size()
        if not tab.is_slice(slice_name):
            tab.new_slice(slice_name)
        out = tab.get_slice(slice_name)
        for i in range(nx):
            vals[ix_x] = tab.get_grid_x(i)
            for j in range(ny):
                vals[ix_y] = tab.get_grid_y(j)
                out[i, j] = self.interp_linear(vals)
                if verbose > 0:
                    print(f"At location values: {vals} interpolated to get: "
                          f"{i} {j} {slice_name} {out[i, j]}")

    def convert_table3d_sum(self, ix_x: int, ix_y: int, tab, x_name: str = "x",
                            y_name: str = "y", slice_name: str = "z") -> None:
        """Sum over all indices but *ix_x* and *ix_y* into a slice of *tab*.

        If the table has no grid the tensor grid is copied. The slice is
        zeroed before the sum is accumulated.
        """
        self._check_xy(ix_x, ix_y, "convert_table3d_sum")
        self._set_table_xy(ix_x, ix_y, tab, x_name, y_name)
        nx, ny = tab.get_size()
        if nx != self.size[ix_x] or ny != self.size[ix_y]:
            raise ValueError(
                f"Grids not commensurate in GriddedTensor.convert_table3d_sum(): "
                f"table is ({nx}, {ny}) but tensor indices have sizes "
                f"({self.size[ix_x]}, {self.size[ix_y]})."
            )
        if not tab.is_slice(slice_name):
            tab.new_slice(slice_name)
        tab.set_slice_all(slice_name, 0.0)

        others = tuple(i for i in range(self.rk) if i not in (ix_x, ix_y))
        plane = self.to_array().sum(axis=others) if others else self.to_array()
        if ix_x > ix_y:
            plane = plane.T
        tab.get_slice(slice_name)[:, :] += plane

    # ------------------------------------------------------------------
    # Rearrangement
    # ------------------------------------------------------------------

    def rearrange_and_copy(self, spec, verbose: int = 0,
                           err_on_fail: bool = True) -> "GriddedTensor":
        """Rearrange, sum, slice or resample indices into a new tensor.

        Parameters
        ----------
        spec : sequence of IndexSpec
            One entry per source index (a trace entry covers two). New
            indices are numbered in the order they appear in *spec*.
        verbose : int, optional
            0 is silent; 1 prints a summary; 2 describes every index;
            3 also traces the summation loop.
        err_on_fail : bool, optional
            If True (default) an invalid *spec* raises
            ``ValueError``. If False an empty rank-0 tensor is returned.

        Returns
        -------
        GriddedTensor
            A newly allocated tensor; this tensor is not modified.

        See Also
        --------
        tensorgrid.index_spec : the ``ix_*`` constructors for *spec*.
        """
        from tensorgrid._rearrange import rearrange_and_copy

        return rearrange_and_copy(self, spec, verbose=verbose, err_on_fail=err_on_fail)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def __getstate__(self) -> dict:
        """Return picklable state tagged with the package version."""
        from tensorgrid._version import __version__

        state = self.__dict__.copy()
        state["_tensorgrid_version"] = __version__
        return state

    def __setstate__(self, state: dict) -> None:
        from tensorgrid._version import __version__

        saved_version = state.pop("_tensorgrid_version", None)
        if saved_version is not None and saved_version != __version__:
            warnings.warn(
                f"This object was saved with tensorgrid {saved_version}, "
                f"but you are loading it with {__version__}.",
                UserWarning,
                stacklevel=2,
            )
        self.__dict__.update(state)

    def save(self, path: str | os.PathLike) -> None:
        """Save the tensor, its grid and interpolation type to a file.

        .. warning::

            The file is written with :mod:`pickle`. Only load files you
            trust.
        """
        with open(os.fspath(path), "wb") as f:
            pickle.dump(self, f, protocol=pickle.HIGHEST_PROTOCOL)

    @classmethod
    def load(cls, path: str | os.PathLike) -> "GriddedTensor":
        """Load a tensor written by :meth:`save`.

        Warns
        -----
        UserWarning
            If the file was saved with a different tensorgrid version.
        """
        with open(os.fspath(path), "rb") as f:
            obj = pickle.load(f)  # noqa: S301
        if not isinstance(obj, cls):
            raise TypeError(
                f"Expected a {cls.__name__} instance, got {type(obj).__name__}"
            )
        return obj

    # ------------------------------------------------------------------
    # Printing
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}("
            f"rank={self.rk}, "
            f"sizes={self.size}, "
            f"grid_set={self.grid_set})"
        )

    def __str__(self) -> str:
        lines = [f"GriddedTensor (rank {self.rk}, {self.total_size():,} elements)"]
        for i in range(self.rk):
            if self.grid_set:
                g = self.copy_grid(i)
                lines.append(f"  Index {i}: size {self.size[i]}, "
                             f"grid [{g[0]:.6g}, {g[-1]:.6g}]")
            else:
                lines.append(f"  Index {i}: size {self.size[i]}, no grid")
        lines.append(f"  Interpolation: {self.itype.value}")
        return "\n".join(lines)
