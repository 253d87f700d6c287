"""Pytest configuration and shared fields for windgrid tests."""

import math
import sys
from pathlib import Path

import numpy as np
import pytest

# Add the repo root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from windgrid.field import GridSpec  # noqa: E402
from windgrid.scalar_field import ScalarField  # noqa: E402
from windgrid.vector_field import VectorField  # noqa: E402


@pytest.fixture
def square_spec():
    """2x2 grid of 1 degree cells with the lower-left corner at (0, 0)."""
    return GridSpec(n_cols=2, n_rows=2, xll_corner=0.0, yll_corner=0.0,
                    cell_x_size=1.0, cell_y_size=1.0)


@pytest.fixture
def square_field(square_spec):
    """[[1, 2], [3, 4]] with row 0 on top."""
    return ScalarField(square_spec, [1, 2, 3, 4])


@pytest.fixture
def ramp_field():
    """4x3 field where value = 10*row + col, no gaps."""
    spec = GridSpec(n_cols=4, n_rows=3, xll_corner=-2.0, yll_corner=40.0,
                    cell_x_size=0.5, cell_y_size=0.5)
    zs = [10 * j + i for j in range(3) for i in range(4)]
    return ScalarField(spec, zs)


def _global_uv(cell=10.0):
    n_cols = int(360 / cell)
    n_rows = int(180 / cell)
    us, vs = [], []
    for j in range(n_rows):
        lat = 90 - cell / 2 - j * cell
        for i in range(n_cols):
            lon = cell / 2 + i * cell
            us.append(10 + 5 * math.sin(math.radians(lon)) * math.cos(math.radians(lat)))
            vs.append(5 * math.cos(math.radians(lon)))
    spec = GridSpec(n_cols=n_cols, n_rows=n_rows, xll_corner=0.0, yll_corner=-90.0,
                    cell_x_size=cell, cell_y_size=cell)
    return spec, us, vs


@pytest.fixture
def global_wind():
    """Smooth global wind stored in [0, 360) longitudes, 10 degree cells."""
    spec, us, vs = _global_uv()
    return VectorField(spec, us, vs)


@pytest.fixture
def uniform_wind():
    """10x10 eastward wind of 1 unit on [0, 10] x [0, 10]."""
    spec = GridSpec(n_cols=10, n_rows=10, xll_corner=0.0, yll_corner=0.0,
                    cell_x_size=1.0, cell_y_size=1.0)
    n = spec.size
    return VectorField(spec, np.ones(n), np.zeros(n))


@pytest.fixture
def earth_records():
    """earth-style u/v pair on a 2x2 grid with nodes at lon 0..1, lat 1..0."""
    header = {"lo1": 0.0, "la1": 1.0, "dx": 1.0, "dy": 1.0, "nx": 2, "ny": 2}
    return [
        {"header": dict(header, parameterNumber=2), "data": [1.0, 2.0, 3.0, None]},
        {"header": dict(header, parameterNumber=3), "data": [0.5, 0.5, 0.5, 0.5]},
    ]
