"""tensorgrid: N-dimensional tensors on numerical grids.

Provides the :class:`GriddedTensor` class for storing values on an
N-dimensional grid, with nearest-point lookup, multilinear and
recursive 1-D interpolation, projection onto a :class:`Table3D`, and an
index rearrangement engine (permute, reverse, slice, sum, trace, fix,
interpolate or resample indices) driven by :class:`IndexSpec` lists.
:class:`GriddedTensor1` to :class:`GriddedTensor4` take indices and
coordinates as positional arguments.
The :class:`KrigeInterpolator` and :class:`KrigeOptimInterpolator`
classes provide one-dimensional Kriging interpolation.

Example
-------
>>> from tensorgrid import GriddedTensor, ix_sum, ix_index
>>> t = GriddedTensor(2, [3, 3])
>>> t.set_grid([[0.0, 1.0, 2.0], [0.0, 1.0, 2.0]])
>>> for i in range(3):
...     for j in range(3):
...         t.set([i, j], i + j)
>>> t.interp_linear([0.5, 0.5])
1.0
>>> t.rearrange_and_copy([ix_sum(0), ix_index(1)]).get_data().tolist()
[3.0, 6.0, 9.0]
"""

from tensorgrid._interp1d import InterpType
from tensorgrid._version import __version__
from tensorgrid.fixed_rank import (
    GriddedTensor1,
    GriddedTensor2,
    GriddedTensor3,
    GriddedTensor4,
)
from tensorgrid.grid import (
    UniformGrid,
    evaluate_grid_formula,
    uniform_grid_end,
    uniform_grid_log_end,
    uniform_grid_log_width,
    uniform_grid_width,
)
from tensorgrid.index_spec import (
    IndexSpec,
    SpecType,
    ix_fixed,
    ix_grid,
    ix_grid_width,
    ix_index,
    ix_interp,
    ix_range,
    ix_reverse,
    ix_sum,
    ix_trace,
)
from tensorgrid.krige import KrigeInterpolator, KrigeOptimInterpolator
from tensorgrid.table3d import Table3D
from tensorgrid.tensor import Tensor, TensorSanityError
from tensorgrid.tensor_grid import GriddedTensor

__all__ = [
    "GriddedTensor",
    "GriddedTensor1",
    "GriddedTensor2",
    "GriddedTensor3",
    "GriddedTensor4",
    "Tensor",
    "TensorSanityError",
    "Table3D",
    "InterpType",
    "UniformGrid",
    "uniform_grid_end",
    "uniform_grid_width",
    "uniform_grid_log_end",
    "uniform_grid_log_width",
    "evaluate_grid_formula",
    "IndexSpec",
    "SpecType",
    "ix_index",
    "ix_range",
    "ix_reverse",
    "ix_trace",
    "ix_sum",
    "ix_fixed",
    "ix_interp",
    "ix_grid",
    "ix_grid_width",
    "KrigeInterpolator",
    "KrigeOptimInterpolator",
    "__version__",
]
