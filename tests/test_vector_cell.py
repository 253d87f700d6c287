"""Tests for the Vector and Cell value types."""

import math

import pytest

from windgrid.cell import Cell
from windgrid.vector import Vector


class TestVector:
    def test_magnitude(self):
        assert Vector(3.0, 4.0).magnitude() == pytest.approx(5.0)
        assert Vector(0.0, 0.0).magnitude() == 0.0

    @pytest.mark.parametrize(
        "u,v,to,frm",
        [
            (0.0, 1.0, 0.0, 180.0),    # northward
            (1.0, 0.0, 90.0, 270.0),   # eastward
            (0.0, -1.0, 180.0, 0.0),   # southward
            (-1.0, 0.0, 270.0, 90.0),  # westward
            (1.0, 1.0, 45.0, 225.0),
        ],
    )
    def test_compass_directions(self, u, v, to, frm):
        vec = Vector(u, v)
        assert vec.direction_to() == pytest.approx(to)
        assert vec.direction_from() == pytest.approx(frm)

    @pytest.mark.parametrize("angle", [a * 7.3 for a in range(50)])
    @pytest.mark.parametrize("speed", [1e-6, 0.3, 12.0])
    def test_directions_in_range_and_opposite(self, angle, speed):
        vec = Vector(speed * math.cos(math.radians(angle)), speed * math.sin(math.radians(angle)))
        to = vec.direction_to()
        frm = vec.direction_from()

        assert 0.0 <= to < 360.0
        assert 0.0 <= frm < 360.0
        diff = (frm - to) % 360.0
        assert diff == pytest.approx(180.0)

    def test_tiny_negative_bearing_stays_below_360(self):
        assert Vector(-1e-300, 1.0).direction_to() < 360.0

    def test_is_immutable(self):
        vec = Vector(1.0, 2.0)
        with pytest.raises(AttributeError):
            vec.u = 5.0


class TestCell:
    def test_equal_cells(self):
        a = Cell((0.5, 1.5), 1.0, 1.0)
        b = Cell((0.5, 1.5), 1.0, 1.0, 1.0)
        assert a == b

    def test_y_size_defaults_to_x_size(self):
        assert Cell((0.0, 0.0), 2.0, 0.25).y_size == 0.25

    @pytest.mark.parametrize(
        "other",
        [
            Cell((0.5, 1.0), 1.0, 1.0),
            Cell((0.5, 1.5), 1.5, 1.0),
            Cell((0.5, 1.5), 1.0, 2.0),
            Cell((0.5, 1.5), 1.0, 1.0, 0.5),
        ],
    )
    def test_any_difference_breaks_equality(self, other):
        assert Cell((0.5, 1.5), 1.0, 1.0) != other

    def test_vector_values_compare_structurally(self):
        a = Cell((0.0, 0.0), Vector(1.0, 2.0), 1.0)
        assert a == Cell((0.0, 0.0), Vector(1.0, 2.0), 1.0)
        assert a != Cell((0.0, 0.0), Vector(1.0, 2.5), 1.0)

    def test_scalar_never_equals_vector(self):
        assert Cell((0.0, 0.0), 1.0, 1.0) != Cell((0.0, 0.0), Vector(1.0, 0.0), 1.0)

    def test_bounds(self):
        c = Cell((10.0, 45.0), 3.0, 1.0, 0.5)
        assert c.bounds() == (9.5, 44.75, 10.5, 45.25)
        assert (c.lon, c.lat) == (10.0, 45.0)
