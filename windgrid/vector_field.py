import logging
from typing import Optional, Tuple

import numpy as np

from .field import Field, GridSpec, to_grid
from .scalar_field import ScalarField
from .vector import Vector

logger = logging.getLogger(__name__)

# derived scalar kind -> Vector method
_DERIVED = {
    "magnitude": "magnitude",
    "direction_to": "direction_to",
    "directionTo": "direction_to",
    "direction_from": "direction_from",
    "directionFrom": "direction_from",
}


class VectorField(Field):
    """
    Field with a Vector (u, v) at each cell.

    us and vs are flat arrays following x-ascending & y-descending order.
    A cell is no-data when either component is.
    """

    def __init__(self, spec: GridSpec, us, vs):
        super().__init__(spec)
        self.u_grid, self.v_grid = self._build_grid(us, vs)
        self.us = self.u_grid.ravel()
        self.vs = self.v_grid.ravel()
        self._update_range()
        logger.debug("VectorField created (%d x %d), range=%s", self.n_cols, self.n_rows, self.range)

    @classmethod
    def from_dict(cls, params: dict) -> "VectorField":
        """{nCols, nRows, xllCorner, yllCorner, cellXSize, cellYSize, noDataValue?, us, vs}"""
        for key in ("us", "vs"):
            if key not in params:
                raise ValueError(f"VectorField descriptor needs a '{key}' array")
        return cls(GridSpec.from_dict(params), params["us"], params["vs"])

    @classmethod
    def from_scalar_fields(cls, u: ScalarField, v: ScalarField) -> "VectorField":
        """Pair two compatible ScalarFields as u/v components."""
        if not u.spec.same_geometry(v.spec):
            raise ValueError(f"U/V grid mismatch: {u.spec} vs {v.spec}")
        # no-data already resolved to NaN in both
        spec = GridSpec(u.n_cols, u.n_rows, u.xll_corner, u.yll_corner,
                        u.cell_x_size, u.cell_y_size)
        return cls(spec, u.zs, v.zs)

    def _build_grid(self, us, vs):
        u = to_grid(us, self.spec, name="us")
        v = to_grid(vs, self.spec, name="vs")

        invalid = np.isnan(u) | np.isnan(v)
        u[invalid] = np.nan
        v[invalid] = np.nan

        u.flags.writeable = False
        v.flags.writeable = False
        return u, v

    def _value_at_indexes(self, i: int, j: int) -> Optional[Vector]:
        u = self.u_grid[j, i]
        if np.isnan(u):
            return None
        return Vector(float(u), float(self.v_grid[j, i]))

    def valid_vectors(self):
        """Valid vectors in grid order, before any filter."""
        ok = ~np.isnan(self.us)
        return [Vector(u, v) for u, v in zip(self.us[ok].tolist(), self.vs[ok].tolist())]

    def get_scalar_field(self, kind: str) -> ScalarField:
        """
        Derived ScalarField with the same geometry.
        kind: 'magnitude' | 'direction_to' | 'direction_from'
        """
        method = _DERIVED.get(kind)
        if method is None:
            raise ValueError(f"Unknown derived field '{kind}'. Use one of {sorted(set(_DERIVED.values()))}")

        zs = np.full(self.num_cells(), np.nan)
        ok = ~np.isnan(self.us)
        zs[ok] = [getattr(Vector(u, v), method)()
                  for u, v in zip(self.us[ok].tolist(), self.vs[ok].tolist())]

        spec = GridSpec(self.n_cols, self.n_rows, self.xll_corner, self.yll_corner,
                        self.cell_x_size, self.cell_y_size)
        return ScalarField(spec, zs)

    def _calculate_range(self) -> Optional[Tuple[float, float]]:
        vectors = self.valid_vectors()
        if self._in_filter is not None:
            vectors = [vec for vec in vectors if self._in_filter(vec)]
        if not vectors:
            return None

        magnitudes = [vec.magnitude() for vec in vectors]
        return min(magnitudes), max(magnitudes)

    def _do_interpolation(self, x, y, g00, g10, g01, g11) -> Vector:
        rx = 1 - x
        ry = 1 - y
        a = rx * ry
        b = x * ry
        c = rx * y
        d = x * y
        u = g00.u * a + g10.u * b + g01.u * c + g11.u * d
        v = g00.v * a + g10.v * b + g01.v * c + g11.v * d
        return Vector(u, v)
