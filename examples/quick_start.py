"""Quick start example: tabulate a 3D function, interpolate and marginalize."""

import math

import numpy as np

from tensorgrid import (
    GriddedTensor,
    Table3D,
    ix_grid,
    ix_index,
    ix_sum,
    uniform_grid_end,
    uniform_grid_log_end,
)


def f(x, y, z):
    """A smooth 3D function: sin(x) * exp(-y) * log(z)."""
    return math.sin(x) * math.exp(-y) * math.log(z)


# Tabulate on a grid (the last index is logarithmically spaced)
t = GriddedTensor.from_uniform_grids([
    uniform_grid_end(-3.0, 3.0, 30),
    uniform_grid_end(0.0, 2.0, 20),
    uniform_grid_log_end(1.0, 100.0, 20),
])
for n in range(t.total_size()):
    i, j, k = t.unpack_index(n)
    t.set([i, j, k], f(t.get_grid(0, i), t.get_grid(1, j), t.get_grid(2, k)))
print(t)

# Interpolate at a test point
point = [1.0, 0.5, 10.0]
exact = f(*point)
lin = t.interp_linear(point)
print(f"\nExact:  {exact:.10f}")
print(f"Linear: {lin:.10f}  (error {abs(lin - exact):.2e})")

# Sum over y and resample x onto a coarser grid
marg = t.rearrange_and_copy(
    [ix_grid(0, -2.0, 2.0, 8), ix_sum(1), ix_index(2)], verbose=1
)
print(f"\nMarginal sizes: {marg.get_size_arr()}, total {marg.total_sum():.6f}")

# Project the marginal onto a table
tab = Table3D()
marg.copy_table3d_align_setxy(0, 1, [0, 0], tab, "x", "z", "f")
print(f"Table sizes: {tab.get_size()}, max {np.max(tab.get_slice('f')):.6f}")
