"""Tests for GriddedTensor grids, lookup, point access and serialization."""

from __future__ import annotations

import pathlib
import warnings

import numpy as np
import pytest

from tensorgrid import (
    GriddedTensor,
    InterpType,
    TensorSanityError,
    uniform_grid_end,
    uniform_grid_log_end,
)


# ======================================================================
# Construction
# ======================================================================

class TestConstruction:
    def test_grid_unset_by_default(self):
        t = GriddedTensor(2, [3, 4])
        assert not t.is_grid_set()
        assert t.itype is InterpType.LINEAR
        t.is_valid()

    def test_from_values(self):
        vals = np.arange(6.0).reshape(2, 3)
        t = GriddedTensor.from_values(vals, [[0.0, 1.0], [5.0, 6.0, 7.0]])
        assert t.get_size_arr() == [2, 3]
        assert t.get([1, 2]) == 5.0
        assert t.get_grid(1, 2) == 7.0

    def test_from_values_copies(self):
        vals = np.zeros((2, 2))
        t = GriddedTensor.from_values(vals)
        vals[0, 0] = 1.0
        assert t.get([0, 0]) == 0.0

    def test_from_values_scalar_raises(self):
        with pytest.raises(ValueError):
            GriddedTensor.from_values(3.0)

    def test_from_uniform_grids(self):
        t = GriddedTensor.from_uniform_grids(
            [uniform_grid_end(0.0, 1.0, 2), uniform_grid_log_end(1.0, 100.0, 2)]
        )
        assert t.get_size_arr() == [3, 3]
        np.testing.assert_allclose(t.copy_grid(1), [1.0, 10.0, 100.0])

    def test_copy_is_independent(self, tg_sum_2d):
        c = tg_sum_2d.copy()
        c.set([0, 0], 99.0)
        c.set_grid_value(0, 0, -5.0)
        assert tg_sum_2d.get([0, 0]) == 0.0
        assert tg_sum_2d.get_grid(0, 0) == 0.0


# ======================================================================
# Grid setters and accessors
# ======================================================================

class TestGrid:
    def test_packed_layout(self):
        t = GriddedTensor(2, [2, 3])
        t.set_grid_packed([0.0, 1.0, 10.0, 20.0, 30.0])
        np.testing.assert_array_equal(t.copy_grid(0), [0.0, 1.0])
        np.testing.assert_array_equal(t.copy_grid(1), [10.0, 20.0, 30.0])
        np.testing.assert_array_equal(t.get_grid_packed(), [0.0, 1.0, 10.0, 20.0, 30.0])
        t.is_valid()

    def test_packed_wrong_length(self):
        t = GriddedTensor(2, [2, 3])
        with pytest.raises(ValueError, match="require 5"):
            t.set_grid_packed([0.0, 1.0])

    def test_set_grid_wrong_size(self):
        t = GriddedTensor(2, [2, 3])
        with pytest.raises(ValueError, match="index 1"):
            t.set_grid([[0.0, 1.0], [0.0, 1.0]])

    def test_set_grid_wrong_count(self):
        t = GriddedTensor(2, [2, 3])
        with pytest.raises(ValueError, match="rank 2"):
            t.set_grid([[0.0, 1.0]])

    def test_grid_on_empty_tensor(self):
        t = GriddedTensor()
        with pytest.raises(ValueError, match="empty tensor"):
            t.default_grid()
        with pytest.raises(ValueError, match="empty tensor"):
            t.set_grid([])

    def test_default_grid(self):
        t = GriddedTensor(2, [2, 3])
        t.default_grid()
        np.testing.assert_array_equal(t.copy_grid(1), [0.0, 1.0, 2.0])

    def test_set_grid_i_vec_only_changes_one_axis(self):
        t = GriddedTensor(3, [2, 3, 2])
        t.default_grid()
        t.set_grid_i_vec(1, [5.0, 6.0, 7.0])
        np.testing.assert_array_equal(t.copy_grid(0), [0.0, 1.0])
        np.testing.assert_array_equal(t.copy_grid(1), [5.0, 6.0, 7.0])
        np.testing.assert_array_equal(t.copy_grid(2), [0.0, 1.0])

    def test_set_grid_i_func(self):
        t = GriddedTensor(2, [3, 4])
        t.default_grid()
        t.set_grid_i_func(1, "10^i")
        np.testing.assert_allclose(t.copy_grid(1), [1.0, 10.0, 100.0, 1000.0])
        np.testing.assert_array_equal(t.copy_grid(0), [0.0, 1.0, 2.0])

    def test_set_grid_i_func_failure_leaves_grid(self):
        t = GriddedTensor(1, [4])
        t.set_grid([[10.0, 20.0, 30.0, 40.0]])
        # Complex at i = 3 only.
        with pytest.raises(ValueError):
            t.set_grid_i_func(0, "sqrt(2-i)")
        np.testing.assert_array_equal(t.copy_grid(0), [10.0, 20.0, 30.0, 40.0])

    def test_set_grid_i_requires_grid(self):
        t = GriddedTensor(1, [3])
        with pytest.raises(RuntimeError, match="Grid not set"):
            t.set_grid_i_vec(0, [1.0, 2.0, 3.0])

    def test_get_grid_errors(self, tg_sum_2d):
        with pytest.raises(ValueError):
            tg_sum_2d.get_grid(2, 0)
        with pytest.raises(IndexError):
            tg_sum_2d.get_grid(0, 3)

    def test_is_valid_detects_bad_grid(self, tg_sum_2d):
        tg_sum_2d.grid = np.zeros(4)
        with pytest.raises(TensorSanityError):
            tg_sum_2d.is_valid()


# ======================================================================
# Lookup and nearest-point access
# ======================================================================

class TestLookup:
    def test_nearest(self, tg_sum_2d):
        assert tg_sum_2d.lookup_grid(0, 1.4) == 1
        assert tg_sum_2d.lookup_grid(0, 1.6) == 2

    def test_boundary(self, tg_sum_2d):
        assert tg_sum_2d.lookup_grid(0, -10.0) == 0
        assert tg_sum_2d.lookup_grid(0, 10.0) == 2

    def test_tie_keeps_first(self, tg_sum_2d):
        assert tg_sum_2d.lookup_grid(1, 0.5) == 0
        assert tg_sum_2d.lookup_grid(1, 1.5) == 1

    def test_lookup_val_and_packed(self, tg_affine_3d):
        ix, val = tg_affine_3d.lookup_grid_val(2, 4.4)
        assert (ix, val) == (3, 4.0)
        assert tg_affine_3d.lookup_grid_packed(2, 4.4) == 4 + 3 + 3

    def test_lookup_vec(self, tg_affine_3d):
        assert tg_affine_3d.lookup_grid_vec([1.4, 1.9, 9.5]) == [2, 2, 0]

    def test_lookup_requires_grid(self):
        t = GriddedTensor(1, [3])
        with pytest.raises(RuntimeError):
            t.lookup_grid(0, 1.0)

    def test_get_val_nearest(self, tg_sum_2d):
        assert tg_sum_2d.get_val([1.4, 0.6]) == 2.0

    def test_get_val_return_closest(self, tg_sum_2d):
        val, closest = tg_sum_2d.get_val([1.4, 0.6], return_closest=True)
        assert val == 2.0
        assert closest == [1.0, 1.0]

    def test_get_val_on_grid_matches_get(self, tg_affine_3d):
        t = tg_affine_3d
        for n in range(t.total_size()):
            ix = t.unpack_index(n)
            point = [t.get_grid(i, ix[i]) for i in range(3)]
            assert t.get_val(point) == t.get(ix)

    def test_set_val(self, tg_sum_2d):
        closest = tg_sum_2d.set_val([2.2, -0.3], 7.0, return_closest=True)
        assert closest == [2.0, 0.0]
        assert tg_sum_2d.get([2, 0]) == 7.0


# ======================================================================
# Resize and clear
# ======================================================================

class TestResize:
    def test_resize_zero_size_keeps_grid(self, tg_sum_2d):
        before = tg_sum_2d.get_grid_packed()
        with pytest.raises(ValueError):
            tg_sum_2d.resize(2, [3, 0])
        assert tg_sum_2d.is_grid_set()
        assert tg_sum_2d.get_size_arr() == [3, 3]
        np.testing.assert_array_equal(tg_sum_2d.get_grid_packed(), before)
        tg_sum_2d.is_valid()

    def test_resize_clears_grid(self, tg_sum_2d):
        tg_sum_2d.resize(1, [4])
        assert not tg_sum_2d.is_grid_set()
        assert tg_sum_2d.total_size() == 4
        tg_sum_2d.is_valid()

    def test_clear(self, tg_sum_2d):
        tg_sum_2d.clear()
        assert tg_sum_2d.get_rank() == 0
        assert not tg_sum_2d.is_grid_set()
        tg_sum_2d.is_valid()


# ======================================================================
# Serialization
# ======================================================================

class TestSerialization:
    def test_save_load_roundtrip(self, tg_affine_3d, tmp_path):
        path = tmp_path / "tg.pkl"
        tg_affine_3d.set_interp_type("cubic")
        tg_affine_3d.save(path)
        loaded = GriddedTensor.load(path)
        np.testing.assert_array_equal(loaded.get_data(), tg_affine_3d.get_data())
        np.testing.assert_array_equal(loaded.get_grid_packed(), tg_affine_3d.get_grid_packed())
        assert loaded.itype is InterpType.CUBIC

    def test_state_carries_version(self, tg_sum_2d):
        from tensorgrid import __version__

        state = tg_sum_2d.__getstate__()
        assert state["_tensorgrid_version"] == __version__
        assert "data" in state and "grid" in state

    def test_interp_after_load(self, tg_sum_2d, tmp_path):
        path = pathlib.Path(tmp_path) / "tg.pkl"
        tg_sum_2d.save(path)
        loaded = GriddedTensor.load(path)
        assert loaded.interp_linear([0.5, 0.5]) == pytest.approx(1.0)

    def test_version_mismatch_warning(self, tg_sum_2d):
        state = tg_sum_2d.__getstate__()
        state["_tensorgrid_version"] = "0.0.0-fake"

        obj = object.__new__(GriddedTensor)
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            obj.__setstate__(state)
            assert len(w) == 1
            assert "0.0.0-fake" in str(w[0].message)
        assert obj.get([2, 2]) == 4.0


# ---------------------------------------------------------------------------
# Repr / Str
# ---------------------------------------------------------------------------

class TestRepr:
    def test_repr(self, tg_sum_2d):
        r = repr(tg_sum_2d)
        assert "rank=2" in r
        assert "[3, 3]" in r
        assert "grid_set=True" in r

    def test_str_no_grid(self):
        s = str(GriddedTensor(2, [2, 5]))
        assert "rank 2" in s
        assert "no grid" in s

    def test_str_with_grid(self, tg_affine_3d):
        s = str(tg_affine_3d)
        assert "60 elements" in s
        assert "grid [10, 1]" in s
        assert "Interpolation: linear" in s
