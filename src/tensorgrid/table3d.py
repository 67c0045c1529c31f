"""Two-dimensional table of named slices on a shared (x, y) grid.

A :class:`Table3D` is the projection target for
:meth:`GriddedTensor.copy_table3d_align` and related methods: two
coordinate vectors and any number of named 2-D ``numpy`` arrays
("slices") of shape ``(nx, ny)`` defined on them.
"""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

import numpy as np
from scipy.interpolate import RegularGridInterpolator


class Table3D:
    """Named 2-D slices on an (x, y) grid.

    Examples
    --------
    >>> tab = Table3D()
    >>> tab.set_xy("x", [0.0, 1.0], "y", [0.0, 1.0, 2.0])
    >>> tab.new_slice("z")
    >>> tab.set(1, 2, "z", 3.0)
    >>> tab.get(1, 2, "z")
    3.0
    """

    def __init__(self):
        self.x_name: str = ""
        self.y_name: str = ""
        self.xval: np.ndarray = np.zeros(0)
        self.yval: np.ndarray = np.zeros(0)
        self.slices: Dict[str, np.ndarray] = {}

    def set_xy(self, x_name: str, x_grid: Sequence[float],
               y_name: str, y_grid: Sequence[float]) -> None:
        """Set the grid. Any existing slices are discarded."""
        x_grid = np.asarray(x_grid, dtype=float).ravel()
        y_grid = np.asarray(y_grid, dtype=float).ravel()
        if len(x_grid) == 0 or len(y_grid) == 0:
            raise ValueError(
                f"Empty grid ({len(x_grid)}, {len(y_grid)}) in Table3D.set_xy()."
            )
        self.x_name, self.y_name = x_name, y_name
        self.xval, self.yval = x_grid.copy(), y_grid.copy()
        self.slices = {}

    def get_size(self) -> Tuple[int, int]:
        return len(self.xval), len(self.yval)

    def is_xy_set(self) -> bool:
        return len(self.xval) > 0 and len(self.yval) > 0

    def _check_xy(self, where: str) -> None:
        if not self.is_xy_set():
            raise RuntimeError(f"Grid not set in Table3D.{where}().")

    def get_x_name(self) -> str:
        return self.x_name

    def get_y_name(self) -> str:
        return self.y_name

    def get_grid_x(self, i: int) -> float:
        return float(self.xval[i])

    def get_grid_y(self, j: int) -> float:
        return float(self.yval[j])

    # ------------------------------------------------------------------
    # Slices
    # ------------------------------------------------------------------

    def new_slice(self, name: str) -> None:
        """Add a zero-filled slice called *name* (no-op if it exists)."""
        self._check_xy("new_slice")
        if name not in self.slices:
            self.slices[name] = np.zeros((len(self.xval), len(self.yval)))

    def is_slice(self, name: str) -> bool:
        return name in self.slices

    def get_slice_names(self) -> List[str]:
        return list(self.slices)

    def get_slice(self, name: str) -> np.ndarray:
        """Return slice *name* itself (not a copy)."""
        try:
            return self.slices[name]
        except KeyError:
            raise KeyError(f"Slice '{name}' not found in Table3D.") from None

    def set_slice_all(self, name: str, val: float) -> None:
        self.get_slice(name)[:, :] = val

    def get(self, i: int, j: int, name: str) -> float:
        return float(self.get_slice(name)[i, j])

    def set(self, i: int, j: int, name: str, val: float) -> None:
        self.get_slice(name)[i, j] = val

    def interp(self, x: float, y: float, name: str) -> float:
        """Bilinear interpolation of slice *name* at ``(x, y)``.

        Points outside the grid are extrapolated from the boundary cell.
        """
        self._check_xy("interp")
        z = self.get_slice(name)
        xg, yg = self.xval, self.yval
        if len(xg) > 1 and xg[-1] < xg[0]:
            xg, z = xg[::-1], z[::-1, :]
        if len(yg) > 1 and yg[-1] < yg[0]:
            yg, z = yg[::-1], z[:, ::-1]
        rgi = RegularGridInterpolator((xg, yg), z, method="linear",
                                      bounds_error=False, fill_value=None)
        return float(rgi([[x, y]])[0])

    def __repr__(self) -> str:
        nx, ny = self.get_size()
        return (
            f"Table3D(x={self.x_name!r}, y={self.y_name!r}, "
            f"size=({nx}, {ny}), slices={self.get_slice_names()})"
        )
