"""
Grid geometry and the query/interpolation engine shared by scalar and
vector fields.

Grid convention (same as ASCIIGrid and earth-style JSON):
  row j increases south from the upper edge (yur_corner)
  column i increases east from the left edge (xll_corner)
"""
import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import numpy as np
from shapely.geometry import Point, shape
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union

from .cell import Cell
from .utils_grid import bbox_contains, clamp

logger = logging.getLogger(__name__)


# ---------------------------
# Grid descriptor
# ---------------------------

_WIRE_KEYS = {
    "n_cols": ("nCols", "ncols", "n_cols"),
    "n_rows": ("nRows", "nrows", "n_rows"),
    "xll_corner": ("xllCorner", "xllcorner", "xll_corner"),
    "yll_corner": ("yllCorner", "yllcorner", "yll_corner"),
    "cell_x_size": ("cellXSize", "cell_x_size"),
    "cell_y_size": ("cellYSize", "cell_y_size"),
    "no_data_value": ("noDataValue", "nodata_value", "no_data_value"),
}


def _pick(d: dict, names, default=KeyError):
    for name in names:
        if name in d:
            return d[name]
    if default is KeyError:
        raise ValueError(f"Grid descriptor is missing '{names[0]}'. Keys: {sorted(d)}")
    return default


@dataclass(frozen=True)
class GridSpec:
    n_cols: int
    n_rows: int
    xll_corner: float   # west lon of the lower-left corner (deg)
    yll_corner: float   # south lat of the lower-left corner (deg)
    cell_x_size: float  # lon spacing (deg, positive)
    cell_y_size: float  # lat spacing (deg, positive)
    no_data_value: Optional[float] = None

    def __post_init__(self):
        if int(self.n_cols) != self.n_cols or self.n_cols <= 0:
            raise ValueError(f"n_cols must be a positive integer, got {self.n_cols!r}")
        if int(self.n_rows) != self.n_rows or self.n_rows <= 0:
            raise ValueError(f"n_rows must be a positive integer, got {self.n_rows!r}")
        if not self.cell_x_size > 0 or not self.cell_y_size > 0:
            raise ValueError(
                f"Cell sizes must be positive, got {self.cell_x_size!r} x {self.cell_y_size!r}"
            )
        object.__setattr__(self, "n_cols", int(self.n_cols))
        object.__setattr__(self, "n_rows", int(self.n_rows))

    @classmethod
    def from_dict(cls, d: dict) -> "GridSpec":
        """
        Build from a parser descriptor, e.g.
          {"nCols": 2, "nRows": 2, "xllCorner": 0, "yllCorner": 0,
           "cellXSize": 1, "cellYSize": 1, "noDataValue": -9999}
        """
        no_data = _pick(d, _WIRE_KEYS["no_data_value"], default=None)
        return cls(
            n_cols=_pick(d, _WIRE_KEYS["n_cols"]),
            n_rows=_pick(d, _WIRE_KEYS["n_rows"]),
            xll_corner=float(_pick(d, _WIRE_KEYS["xll_corner"])),
            yll_corner=float(_pick(d, _WIRE_KEYS["yll_corner"])),
            cell_x_size=float(_pick(d, _WIRE_KEYS["cell_x_size"])),
            cell_y_size=float(_pick(d, _WIRE_KEYS["cell_y_size"])),
            no_data_value=None if no_data is None else float(no_data),
        )

    def to_dict(self) -> dict:
        return {
            "nCols": self.n_cols,
            "nRows": self.n_rows,
            "xllCorner": self.xll_corner,
            "yllCorner": self.yll_corner,
            "cellXSize": self.cell_x_size,
            "cellYSize": self.cell_y_size,
            "noDataValue": self.no_data_value,
        }

    @property
    def size(self) -> int:
        return self.n_cols * self.n_rows

    def same_geometry(self, other: "GridSpec") -> bool:
        return (
            self.n_cols == other.n_cols
            and self.n_rows == other.n_rows
            and self.xll_corner == other.xll_corner
            and self.yll_corner == other.yll_corner
            and self.cell_x_size == other.cell_x_size
            and self.cell_y_size == other.cell_y_size
        )


def to_grid(values, spec: GridSpec, name: str = "values") -> np.ndarray:
    """
    Reshape a flat row-major array (y-descending, x-ascending) into a
    (n_rows, n_cols) float grid. No-data (None, non-finite, or equal to
    spec.no_data_value) becomes NaN.
    """
    raw = list(values) if not isinstance(values, np.ndarray) else values.ravel()
    if len(raw) != spec.size:
        raise ValueError(
            f"Grid size mismatch for '{name}': got {len(raw)}, expected "
            f"{spec.size} ({spec.n_rows} rows x {spec.n_cols} cols)"
        )

    if isinstance(raw, np.ndarray) and raw.dtype != object:
        a = raw.astype(np.float64, copy=True)
    else:
        a = np.array([np.nan if v is None else v for v in raw], dtype=np.float64)

    a[~np.isfinite(a)] = np.nan
    if spec.no_data_value is not None:
        a[a == spec.no_data_value] = np.nan
    return a.reshape((spec.n_rows, spec.n_cols))


def mask_geometry(mask) -> Optional[BaseGeometry]:
    """
    Normalize a spatial mask into a shapely geometry.
    Accepts a shapely geometry or a GeoJSON mapping (geometry, Feature
    or FeatureCollection).
    """
    if mask is None or isinstance(mask, BaseGeometry):
        return mask

    kind = mask.get("type")
    if kind == "FeatureCollection":
        return unary_union([shape(f["geometry"]) for f in mask["features"]])
    if kind == "Feature":
        return shape(mask["geometry"])
    return shape(mask)


# ---------------------------
# Field
# ---------------------------

class Field:
    """
    Base field over a regular lon/lat grid.

    Subclasses provide the storage and the value type:
      _value_at_indexes(i, j) -> value or None
      _do_interpolation(x, y, g00, g10, g01, g11) -> value
      _calculate_range() -> (min, max) or None
    """

    def __init__(self, spec: GridSpec):
        self.spec = spec

        self.n_cols = spec.n_cols
        self.n_rows = spec.n_rows

        # ll = lower-left
        self.xll_corner = spec.xll_corner
        self.yll_corner = spec.yll_corner

        self.cell_x_size = spec.cell_x_size
        self.cell_y_size = spec.cell_y_size

        # ur = upper-right
        self.xur_corner = spec.xll_corner + spec.n_cols * spec.cell_x_size
        self.yur_corner = spec.yll_corner + spec.n_rows * spec.cell_y_size

        self.is_continuous = (self.xur_corner - self.xll_corner) >= 360
        self.longitude_needs_wrapping = self.xur_corner > 180  # [0, 360] --> [-180, 180]

        self.range = None
        self._in_filter: Optional[Callable] = None
        self._spatial_mask: Optional[BaseGeometry] = None

    # --- subclass hooks ---

    def _value_at_indexes(self, i: int, j: int):
        raise NotImplementedError

    def _do_interpolation(self, x, y, g00, g10, g01, g11):
        raise NotImplementedError

    def _calculate_range(self):
        raise NotImplementedError

    def _update_range(self):
        self.range = self._calculate_range()

    # --- grid enumeration ---

    def num_cells(self) -> int:
        return self.n_rows * self.n_cols

    def get_cells(self, stride: int = 1) -> List[Cell]:
        """Every stride-th cell, y-descending then x-ascending."""
        if stride < 1:
            raise ValueError(f"stride must be >= 1, got {stride}")
        cells = []
        for j in range(0, self.n_rows, stride):
            for i in range(0, self.n_cols, stride):
                lon, lat = self._lon_lat_at_indexes(i, j)
                value = self._value_at_indexes(i, j)
                cells.append(Cell((lon, lat), value, self.cell_x_size, self.cell_y_size))
        return cells

    # --- inclusion criteria ---

    def set_filter(self, f: Optional[Callable]):
        self._in_filter = f
        self._update_range()

    def set_spatial_mask(self, m):
        self._spatial_mask = mask_geometry(m)
        logger.debug("Spatial mask %s", "cleared" if m is None else "set")

    def _passes_filter(self, value) -> bool:
        return self._in_filter is None or bool(self._in_filter(value))

    # --- extent & containment ---

    def extent(self) -> Tuple[float, float, float, float]:
        xmin, xmax = self._get_wrapped_longitudes()
        return xmin, self.yll_corner, xmax, self.yur_corner

    def _get_wrapped_longitudes(self) -> Tuple[float, float]:
        """[xmin, xmax] in the [-180, 180] range."""
        xmin = self.xll_corner
        xmax = self.xur_corner

        if self.is_continuous:
            # any global grid, whatever its origin
            xmin = -180.0
            xmax = 180.0
        elif self.longitude_needs_wrapping:
            # partial grid stored in [0, 360): only right when the whole
            # grid lies east of 180
            xmin = self.xll_corner - 360.0
            xmax = self.xur_corner - 360.0
        return xmin, xmax

    def contains(self, lon: float, lat: float) -> bool:
        if self._spatial_mask is not None:
            return self._point_in_mask(lon, lat)
        return self._point_in_extent(lon, lat)

    def not_contains(self, lon: float, lat: float) -> bool:
        return not self.contains(lon, lat)

    def _point_in_extent(self, lon: float, lat: float) -> bool:
        return bbox_contains(self.extent(), lon, lat)

    def _point_in_mask(self, lon: float, lat: float) -> bool:
        # geojson, lon-lat order
        return self._spatial_mask.intersects(Point(lon, lat))

    # --- lookups ---

    def value_at(self, lon: float, lat: float):
        """Nearest value (no interpolation), None if unavailable."""
        if self.not_contains(lon, lat):
            return None

        i, j = self._get_decimal_indexes(lon, lat)
        ci = self._clamp_column_index(int(math.floor(i)))
        cj = self._clamp_row_index(int(math.floor(j)))

        value = self._value_at_indexes(ci, cj)
        if value is None or not self._passes_filter(value):
            return None
        return value

    def has_value_at(self, lon: float, lat: float) -> bool:
        value = self.value_at(lon, lat)
        return value is not None and self._passes_filter(value)

    def not_has_value_at(self, lon: float, lat: float) -> bool:
        return not self.has_value_at(lon, lat)

    def interpolated_value_at(self, lon: float, lat: float):
        """Bilinear value at lon-lat, None outside or without 4 valid neighbours."""
        if self.not_contains(lon, lat):
            return None

        i, j = self._get_decimal_indexes(lon, lat)
        # grid nodes sit on cell centers
        return self.interpolated_value_at_indexes(i - 0.5, j - 0.5)

    def interpolated_value_at_indexes(self, i: float, j: float):
        """
        Bilinear value at fractional indexes (integer indexes = cell centers).

             fi  i   ci
          ---G---|---G--- fj
           j ___ .   |
          ---G-------G--- cj

        On continuous grids the column after the last one is column 0 (and
        the one before column 0 is the last); beyond that indexes clamp.
        """
        fi, ci, fj, cj = self._get_four_surrounding_indexes(i, j)
        values = self._get_four_surrounding_values(fi, ci, fj, cj)
        if values is None:
            return None

        x = i - math.floor(i)
        y = j - math.floor(j)
        g00, g10, g01, g11 = values
        return self._do_interpolation(x, y, g00, g10, g01, g11)

    def _get_decimal_indexes(self, lon: float, lat: float) -> Tuple[float, float]:
        if self.is_continuous:
            lon = self.xll_corner + (lon - self.xll_corner) % 360.0
        elif self.longitude_needs_wrapping and lon < self.xll_corner:
            lon = lon + 360.0
        i = (lon - self.xll_corner) / self.cell_x_size
        j = (self.yur_corner - lat) / self.cell_y_size
        return i, j

    def _get_four_surrounding_indexes(self, i: float, j: float) -> Tuple[int, int, int, int]:
        fi = int(math.floor(i))
        ci = fi + 1
        if self.is_continuous:
            # only the seam wraps, farther indexes still clamp
            if fi == -1:
                fi = self.n_cols - 1
            if ci == self.n_cols:
                ci = 0
        fi = self._clamp_column_index(fi)
        ci = self._clamp_column_index(ci)

        fj = int(math.floor(j))
        cj = self._clamp_row_index(fj + 1)
        fj = self._clamp_row_index(fj)
        return fi, ci, fj, cj

    def _get_four_surrounding_values(self, fi, ci, fj, cj):
        g00 = self._value_at_indexes(fi, fj)
        g10 = self._value_at_indexes(ci, fj)
        g01 = self._value_at_indexes(fi, cj)
        g11 = self._value_at_indexes(ci, cj)
        if g00 is None or g10 is None or g01 is None or g11 is None:
            return None
        return g00, g10, g01, g11

    def random_position(self, rng: Optional[np.random.Generator] = None) -> Tuple[float, float]:
        """Center (lon, lat) of a uniformly chosen cell."""
        if rng is None:
            rng = np.random.default_rng()
        i = int(rng.integers(0, self.n_cols))
        j = int(rng.integers(0, self.n_rows))
        return self._lon_lat_at_indexes(i, j)

    # --- index <-> coordinate helpers ---

    def _lon_lat_at_indexes(self, i: int, j: int) -> Tuple[float, float]:
        return self._longitude_at_x(i), self._latitude_at_y(j)

    def _longitude_at_x(self, i: int) -> float:
        lon = self.xll_corner + self.cell_x_size / 2.0 + i * self.cell_x_size
        if self.longitude_needs_wrapping and lon > 180:
            lon -= 360.0
        return lon

    def _latitude_at_y(self, j: int) -> float:
        return self.yur_corner - self.cell_y_size / 2.0 - j * self.cell_y_size

    def _clamp_column_index(self, ii: int) -> int:
        return clamp(ii, 0, self.n_cols - 1)

    def _clamp_row_index(self, jj: int) -> int:
        return clamp(jj, 0, self.n_rows - 1)

    def __repr__(self):
        return (
            f"{type(self).__name__}({self.n_cols}x{self.n_rows}, "
            f"extent={self.extent()}, range={self.range})"
        )
