import logging
from typing import Optional, Tuple

import numpy as np

from .field import Field, GridSpec, to_grid

logger = logging.getLogger(__name__)


class ScalarField(Field):
    """
    Field with a float at each cell.

    zs is a flat array following x-ascending & y-descending order
    (same as in ASCIIGrid). No-data entries are stored as NaN.
    """

    def __init__(self, spec: GridSpec, zs):
        super().__init__(spec)
        self.grid = self._build_grid(zs)
        self.zs = self.grid.ravel()
        self._update_range()
        logger.debug("ScalarField created (%d x %d), range=%s", self.n_cols, self.n_rows, self.range)

    @classmethod
    def from_dict(cls, params: dict) -> "ScalarField":
        """{nCols, nRows, xllCorner, yllCorner, cellXSize, cellYSize, noDataValue?, zs}"""
        if "zs" not in params:
            raise ValueError("ScalarField descriptor needs a 'zs' array")
        return cls(GridSpec.from_dict(params), params["zs"])

    def _build_grid(self, zs) -> np.ndarray:
        grid = to_grid(zs, self.spec, name="zs")
        grid.flags.writeable = False
        return grid

    def _value_at_indexes(self, i: int, j: int) -> Optional[float]:
        z = self.grid[j, i]  # <-- j,i !!
        if np.isnan(z):
            return None
        return float(z)

    def valid_values(self) -> np.ndarray:
        """Valid values in grid order, before any filter."""
        return self.zs[~np.isnan(self.zs)]

    def _calculate_range(self) -> Optional[Tuple[float, float]]:
        data = self.valid_values()
        if self._in_filter is not None:
            data = np.array([z for z in data.tolist() if self._in_filter(z)], dtype=np.float64)
        if data.size == 0:
            return None
        return float(data.min()), float(data.max())

    def _do_interpolation(self, x, y, g00, g10, g01, g11) -> float:
        rx = 1 - x
        ry = 1 - y
        return g00 * rx * ry + g10 * x * ry + g01 * rx * y + g11 * x * y
