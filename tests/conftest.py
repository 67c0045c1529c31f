"""Shared test fixtures for tensorgrid tests."""

import numpy as np
import pytest

from tensorgrid import GriddedTensor


# ---------------------------------------------------------------------------
# Test functions
# ---------------------------------------------------------------------------

def affine_3d(x, y, z):
    """2x - 3y + 0.5z + 1"""
    return 2.0 * x - 3.0 * y + 0.5 * z + 1.0


AFFINE_GRIDS = [
    [0.0, 0.5, 1.5, 3.0],
    [-1.0, 0.0, 2.0],
    [10.0, 8.0, 5.0, 4.0, 1.0],
]


def fill_from_grid(t, func):
    """Set every element of *t* to ``func(*coordinates)``."""
    for n in range(t.total_size()):
        ix = t.unpack_index(n)
        t.data[n] = func(*[t.get_grid(i, ix[i]) for i in range(t.rk)])
    return t


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tg_sum_2d():
    """3x3 tensor on grid [0, 1, 2] x [0, 1, 2] with v(i, j) = i + j."""
    t = GriddedTensor(2, [3, 3])
    t.set_grid([[0.0, 1.0, 2.0], [0.0, 1.0, 2.0]])
    for i in range(3):
        for j in range(3):
            t.set([i, j], i + j)
    return t


@pytest.fixture
def tg_affine_3d():
    """4x3x5 tensor with affine values on a non-uniform grid.

    The last index has a decreasing grid.
    """
    t = GriddedTensor(3, [4, 3, 5])
    t.set_grid(AFFINE_GRIDS)
    return fill_from_grid(t, affine_3d)


@pytest.fixture
def tg_onehot_3d():
    """2x3x4 tensor of zeros except 5.0 at (1, 2, 3), default grid."""
    t = GriddedTensor(3, [2, 3, 4])
    t.default_grid()
    t.set([1, 2, 3], 5.0)
    return t


@pytest.fixture
def tg_random_3d():
    """3x4x5 tensor with reproducible random values on the default grid."""
    rng = np.random.default_rng(42)
    t = GriddedTensor.from_values(rng.normal(size=(3, 4, 5)))
    t.default_grid()
    return t
