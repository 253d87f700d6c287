"""Tests for ScalarField construction, no-data handling, filters and range."""

import numpy as np
import pytest

from windgrid.field import GridSpec
from windgrid.scalar_field import ScalarField


class TestConstruction:
    def test_from_dict(self):
        field = ScalarField.from_dict({
            "nCols": 2, "nRows": 2, "xllCorner": 0, "yllCorner": 0,
            "cellXSize": 1, "cellYSize": 1, "zs": [1, 2, 3, 4],
        })
        assert field.grid.shape == (2, 2)
        assert field.grid[0, 1] == 2.0
        assert field.grid[1, 0] == 3.0

    def test_length_mismatch_fails_fast(self, square_spec):
        with pytest.raises(ValueError, match="Grid size mismatch"):
            ScalarField(square_spec, [1, 2, 3])

    def test_missing_values_array(self):
        with pytest.raises(ValueError, match="zs"):
            ScalarField.from_dict({"nCols": 1, "nRows": 1, "xllCorner": 0,
                                   "yllCorner": 0, "cellXSize": 1, "cellYSize": 1})

    def test_no_data_sentinel_is_not_zero(self):
        spec = GridSpec(2, 2, 0.0, 0.0, 1.0, 1.0, no_data_value=-9999.0)
        field = ScalarField(spec, [1, -9999, 0, float("inf")])
        assert field.value_at(0.5, 1.5) == 1.0
        assert field.value_at(1.5, 1.5) is None
        assert field.value_at(0.5, 0.5) == 0.0
        assert field.value_at(1.5, 0.5) is None
        assert field.range == (0.0, 1.0)

    def test_grid_is_a_copy(self, square_spec):
        zs = np.array([1.0, 2.0, 3.0, 4.0])
        field = ScalarField(square_spec, zs)
        zs[0] = 100.0
        assert field.value_at(0.5, 1.5) == 1.0
        with pytest.raises(ValueError):
            field.grid[0, 0] = 5.0

    def test_accepts_2d_array(self, square_spec):
        field = ScalarField(square_spec, np.array([[1, 2], [3, 4]]))
        assert field.value_at(1.5, 0.5) == 4.0


class TestRange:
    def test_range(self, square_field):
        assert square_field.range == (1.0, 4.0)
        assert square_field.range[0] <= square_field.range[1]

    def test_all_missing_has_no_range(self, square_spec):
        field = ScalarField(square_spec, [None, None, None, None])
        assert field.range is None
        assert field.value_at(0.5, 0.5) is None

    def test_filter_recomputes_range(self, square_spec):
        field = ScalarField(square_spec, [-2, -1, 3, 4])
        assert field.range == (-2.0, 4.0)

        field.set_filter(lambda z: z >= 0)
        assert field.range[0] >= 0
        assert field.range == (3.0, 4.0)

        field.set_filter(None)
        assert field.range == (-2.0, 4.0)

    def test_filter_excludes_values(self, square_spec):
        field = ScalarField(square_spec, [-2, -1, 3, 4])
        field.set_filter(lambda z: z >= 0)
        assert field.value_at(0.5, 1.5) is None
        assert not field.has_value_at(0.5, 1.5)
        assert field.has_value_at(0.5, 0.5)

    def test_filter_rejecting_everything(self, square_field):
        square_field.set_filter(lambda z: False)
        assert square_field.range is None
