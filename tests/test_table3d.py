"""Tests for Table3D and projection of gridded tensors onto it."""

from __future__ import annotations

import numpy as np
import pytest

from conftest import affine_3d
from tensorgrid import Table3D


# ======================================================================
# Table3D
# ======================================================================

class TestTable3D:
    def test_empty(self):
        tab = Table3D()
        assert tab.get_size() == (0, 0)
        assert not tab.is_xy_set()

    def test_slices(self):
        tab = Table3D()
        tab.set_xy("a", [0.0, 1.0], "b", [0.0, 1.0, 2.0])
        tab.new_slice("z")
        tab.set(1, 2, "z", 3.0)
        assert tab.get(1, 2, "z") == 3.0
        assert tab.get_slice("z").shape == (2, 3)
        assert tab.get_slice_names() == ["z"]
        assert tab.get_x_name() == "a"

    def test_set_slice_all(self):
        tab = Table3D()
        tab.set_xy("x", [0.0, 1.0], "y", [0.0, 1.0])
        tab.new_slice("z")
        tab.set_slice_all("z", 2.5)
        np.testing.assert_array_equal(tab.get_slice("z"), np.full((2, 2), 2.5))

    def test_missing_slice(self):
        tab = Table3D()
        tab.set_xy("x", [0.0], "y", [0.0])
        with pytest.raises(KeyError):
            tab.get(0, 0, "w")

    def test_new_slice_needs_grid(self):
        with pytest.raises(RuntimeError):
            Table3D().new_slice("z")

    def test_interp(self):
        tab = Table3D()
        tab.set_xy("x", [0.0, 1.0, 2.0], "y", [3.0, 1.0])
        tab.new_slice("z")
        for i in range(3):
            for j in range(2):
                tab.set(i, j, "z", 2.0 * tab.get_grid_x(i) + tab.get_grid_y(j))
        assert tab.interp(0.5, 2.0, "z") == pytest.approx(3.0)
        assert tab.interp(3.0, 1.0, "z") == pytest.approx(7.0)


# ======================================================================
# Aligned copies
# ======================================================================

class TestAlign:
    def test_align_setxy(self, tg_affine_3d):
        t = tg_affine_3d
        tab = Table3D()
        t.copy_table3d_align_setxy(0, 2, [0, 1, 0], tab, "x", "z", "f")
        assert tab.get_size() == (4, 5)
        np.testing.assert_array_equal(tab.xval, t.copy_grid(0))
        np.testing.assert_array_equal(tab.yval, t.copy_grid(2))
        for i in range(4):
            for k in range(5):
                assert tab.get(i, k, "f") == t.get([i, 1, k])

    def test_align_swapped_axes(self, tg_affine_3d):
        t = tg_affine_3d
        tab = Table3D()
        t.copy_table3d_align_setxy(2, 0, [0, 2, 0], tab)
        assert tab.get_size() == (5, 4)
        for k in range(5):
            for i in range(4):
                assert tab.get(k, i, "z") == t.get([i, 2, k])

    def test_align_size_mismatch(self, tg_affine_3d):
        tab = Table3D()
        tab.set_xy("x", [0.0, 1.0], "y", [0.0, 1.0])
        with pytest.raises(ValueError, match="commensurate"):
            tg_affine_3d.copy_table3d_align(0, 1, [0, 0, 0], tab)

    @pytest.mark.parametrize("ix_x,ix_y", [(1, 1), (0, 3), (-1, 0)])
    def test_bad_axes(self, tg_affine_3d, ix_x, ix_y):
        with pytest.raises(ValueError, match="equal"):
            tg_affine_3d.copy_table3d_align_setxy(ix_x, ix_y, [0, 0, 0], Table3D())


# ======================================================================
# Interpolated copies
# ======================================================================

class TestInterpCopy:
    def test_interp_on_table_grid(self, tg_affine_3d):
        t = tg_affine_3d
        tab = Table3D()
        tab.set_xy("x", np.linspace(0.0, 3.0, 7), "y", np.linspace(-1.0, 2.0, 4))
        t.copy_table3d_interp(0, 1, [0, 0, 2], tab)
        z = t.get_grid(2, 2)
        for i in range(7):
            for j in range(4):
                expected = affine_3d(tab.get_grid_x(i), tab.get_grid_y(j), z)
                assert tab.get(i, j, "z") == pytest.approx(expected, abs=1e-12)

    def test_interp_without_table_grid_aligns(self, tg_affine_3d):
        t = tg_affine_3d
        tab = Table3D()
        t.copy_table3d_interp(1, 2, [3, 0, 0], tab)
        assert tab.get_size() == (3, 5)
        assert tab.get(2, 4, "z") == t.get([3, 2, 4])

    def test_interp_values(self, tg_affine_3d):
        t = tg_affine_3d
        tab = Table3D()
        tab.set_xy("y", [-0.5, 0.5, 1.5], "z", [9.0, 2.0])
        t.copy_table3d_interp_values(1, 2, [2.4, 0.0, 0.0], tab, "w")
        assert tab.get(1, 1, "w") == pytest.approx(affine_3d(2.4, 0.5, 2.0), abs=1e-12)

    def test_interp_values_setxy(self, tg_affine_3d):
        t = tg_affine_3d
        tab = Table3D()
        t.copy_table3d_interp_values_setxy(0, 1, [0.0, 0.0, 6.0], tab)
        assert tab.get_size() == (4, 3)
        assert tab.get(3, 0, "z") == pytest.approx(affine_3d(3.0, -1.0, 6.0), abs=1e-12)

    def test_interp_values_requires_table_grid(self, tg_affine_3d):
        with pytest.raises(RuntimeError, match="Grid not set"):
            tg_affine_3d.copy_table3d_interp_values(0, 1, [0.0, 0.0, 1.0], Table3D())

    def test_interp_values_wrong_length(self, tg_affine_3d):
        tab = Table3D()
        tab.set_xy("x", [0.0], "y", [0.0])
        with pytest.raises(ValueError, match="rank is 3"):
            tg_affine_3d.copy_table3d_interp_values(0, 1, [0.0, 0.0], tab)

    def test_interp_values_verbose(self, tg_sum_2d, capsys):
        tab = Table3D()
        tab.set_xy("x", [0.5], "y", [0.5])
        tg_sum_2d.copy_table3d_interp_values(0, 1, [0.0, 0.0], tab, verbose=1)
        assert "interpolated to get" in capsys.readouterr().out
        assert tab.get(0, 0, "z") == pytest.approx(1.0)


# ======================================================================
# Summed projection
# ======================================================================

class TestSum:
    def test_sum_marginal(self, tg_random_3d):
        t = tg_random_3d
        tab = Table3D()
        t.convert_table3d_sum(2, 0, tab)
        expected = t.to_array().sum(axis=1).T
        np.testing.assert_allclose(tab.get_slice("z"), expected)

    def test_sum_conserves_total(self, tg_onehot_3d):
        tab = Table3D()
        tg_onehot_3d.convert_table3d_sum(0, 2, tab)
        assert tab.get_slice("z").sum() == pytest.approx(5.0)
        assert tab.get(1, 3, "z") == 5.0

    def test_sum_overwrites_previous_slice(self, tg_onehot_3d):
        tab = Table3D()
        tg_onehot_3d.convert_table3d_sum(0, 1, tab)
        tg_onehot_3d.convert_table3d_sum(0, 1, tab)
        assert tab.get(1, 2, "z") == 5.0

    def test_rank2_sum_is_copy(self, tg_sum_2d):
        tab = Table3D()
        tg_sum_2d.convert_table3d_sum(0, 1, tab)
        np.testing.assert_array_equal(tab.get_slice("z"), tg_sum_2d.to_array())
