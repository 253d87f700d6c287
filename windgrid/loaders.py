"""
Builders that turn external grid formats into ScalarField / VectorField.

Supported inputs:
  - ASCIIGrid text (NCOLS/NROWS/XLLCORNER|XLLCENTER/.../NODATA_VALUE header)
  - earth-style JSON u/v records: [{"header": {...}, "data": [...]}, {...}]
    plain or gzip-compressed (*.json.gz)
  - rectilinear xarray DataArrays with 1-D latitude/longitude coords
  - remote text over HTTP
"""
import gzip
import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Callable, Dict, List, Sequence

import numpy as np
import requests
import xarray as xr

from .field import GridSpec
from .scalar_field import ScalarField
from .vector_field import VectorField

logger = logging.getLogger(__name__)


# ---------------------------
# ASCIIGrid
# ---------------------------

def parse_ascii_grid_header(header_lines: Sequence[str]) -> GridSpec:
    """
    Parse the 6 header lines of an ASCIIGrid. Accepts either the
    XLLCORNER/YLLCORNER or the XLLCENTER/YLLCENTER convention.
    """
    try:
        items = {}
        for line in header_lines[:6]:
            parts = line.split()
            items[parts[0].strip().upper()] = float(parts[1])

        cell_size = items["CELLSIZE"]
        uses_corner = "XLLCORNER" in items
        if uses_corner:
            xll, yll = items["XLLCORNER"], items["YLLCORNER"]
        else:
            xll = items["XLLCENTER"] - cell_size / 2.0
            yll = items["YLLCENTER"] - cell_size / 2.0

        return GridSpec(
            n_cols=int(items["NCOLS"]),
            n_rows=int(items["NROWS"]),
            xll_corner=xll,
            yll_corner=yll,
            cell_x_size=cell_size,
            cell_y_size=cell_size,
            no_data_value=items.get("NODATA_VALUE"),
        )
    except (IndexError, KeyError, ValueError) as err:
        raise ValueError(f"Not a valid ASCIIGrid header: {err!r}") from err


def _ascii_grid_values(text: str, scale_factor: float = 1):
    lines = text.splitlines()
    if len(lines) < 6:
        raise ValueError(f"Not a valid ASCIIGrid: expected 6 header lines, got {len(lines)}")

    spec = parse_ascii_grid_header(lines[:6])

    # data: left-right and top-down
    zs = []
    for line in lines[6:]:
        line = line.strip()
        if line == "":
            break
        zs.extend(float(item) for item in line.split())

    a = np.array(zs, dtype=np.float64)
    if spec.no_data_value is not None:
        a[a == spec.no_data_value] = np.nan
    a = a * scale_factor
    # masked already; scaled values must not hit the sentinel again
    return replace(spec, no_data_value=None), a


def scalar_field_from_ascii_grid(text: str, scale_factor: float = 1) -> ScalarField:
    spec, zs = _ascii_grid_values(text, scale_factor)
    logger.info("ASCIIGrid parsed: %d x %d", spec.n_cols, spec.n_rows)
    return ScalarField(spec, zs)


def vector_field_from_ascii_grids(text_u: str, text_v: str, scale_factor: float = 1) -> VectorField:
    u = scalar_field_from_ascii_grid(text_u, scale_factor)
    v = scalar_field_from_ascii_grid(text_v, scale_factor)
    return VectorField.from_scalar_fields(u, v)


# ---------------------------
# earth-style JSON
# ---------------------------

def load_json(path) -> object:
    path = Path(path)
    if path.name.endswith((".json.gz", ".json.gzip")):
        with gzip.open(path, "rt", encoding="utf-8") as f:
            return json.load(f)
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _earth_spec(header: dict) -> GridSpec:
    """
    Earth-style header:
      lon(i) = lo1 + i*dx
      lat(j) = la1 - j*dy   (la1 is the northern row)
    Those nodes become cell centers.
    """
    lo1 = float(header["lo1"])
    la1 = float(header["la1"])
    dx = float(header["dx"])
    dy = float(header["dy"])
    nx = int(header["nx"])
    ny = int(header["ny"])

    return GridSpec(
        n_cols=nx,
        n_rows=ny,
        xll_corner=lo1 - dx / 2.0,
        yll_corner=la1 + dy / 2.0 - ny * dy,
        cell_x_size=dx,
        cell_y_size=dy,
    )


def vector_field_from_earth_json(records: List[dict]) -> VectorField:
    """
    records = [u_record, v_record]; order is taken from header.parameterNumber
    (2 = u, 3 = v) when present.
    """
    if len(records) < 2:
        raise ValueError(f"Expected a u and a v record, got {len(records)}")

    u_rec, v_rec = records[0], records[1]
    if u_rec["header"].get("parameterNumber") == 3 and v_rec["header"].get("parameterNumber") == 2:
        u_rec, v_rec = v_rec, u_rec

    uh, vh = u_rec["header"], v_rec["header"]
    for k in ("lo1", "la1", "dx", "dy", "nx", "ny"):
        if uh.get(k) != vh.get(k):
            raise ValueError(f"U/V grid mismatch on header key '{k}'")

    spec = _earth_spec(uh)
    return VectorField(spec, u_rec["data"], v_rec["data"])


# ---------------------------
# xarray
# ---------------------------

def _rectilinear(da: xr.DataArray) -> xr.DataArray:
    if ("latitude" not in da.dims) or ("longitude" not in da.dims):
        raise ValueError(f"Unsupported grid/dims. dims={da.dims}, coords={list(da.coords)}")
    if "time" in da.dims:
        da = da.isel(time=0)
    # y-descending, x-ascending
    return da.sortby("latitude", ascending=False).sortby("longitude").transpose("latitude", "longitude")


def _spec_from_dataarray(da: xr.DataArray) -> GridSpec:
    lats = da["latitude"].values
    lons = da["longitude"].values
    if len(lats) < 2 or len(lons) < 2:
        raise ValueError("Need at least 2 latitudes and 2 longitudes to infer cell size")

    dx = float((lons.max() - lons.min()) / (len(lons) - 1))
    dy = float((lats.max() - lats.min()) / (len(lats) - 1))

    return GridSpec(
        n_cols=len(lons),
        n_rows=len(lats),
        xll_corner=float(lons.min()) - dx / 2.0,
        yll_corner=float(lats.min()) - dy / 2.0,
        cell_x_size=dx,
        cell_y_size=dy,
    )


def field_from_dataarray(da: xr.DataArray) -> ScalarField:
    da = _rectilinear(da)
    return ScalarField(_spec_from_dataarray(da), da.values.astype("float64"))


def vector_field_from_dataarrays(u: xr.DataArray, v: xr.DataArray) -> VectorField:
    if u.shape != v.shape:
        raise ValueError(f"u and v shapes differ: {u.shape} vs {v.shape}")
    u = _rectilinear(u)
    v = _rectilinear(v)
    return VectorField(_spec_from_dataarray(u), u.values.astype("float64"), v.values.astype("float64"))


# ---------------------------
# remote & cached
# ---------------------------

def fetch_text(url: str, timeout: float = 60) -> str:
    """GET a text grid (e.g. an .asc file). Raises on HTTP errors."""
    logger.info("Downloading: %s", url)
    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()
    return resp.text


def load_field(path):
    """Load a field from disk, picking the reader by file name."""
    path = Path(path)
    if path.suffix.lower() == ".asc":
        return scalar_field_from_ascii_grid(path.read_text(encoding="utf-8"))
    return vector_field_from_earth_json(load_json(path))


class FieldCache:
    def __init__(self, folder: str, loader: Callable = load_field):
        self.folder = Path(folder)
        self.loader = loader
        self._mem: Dict[str, object] = {}  # filename -> field

    def load(self, filename: str):
        if filename not in self._mem:
            logger.debug("Loading field %s", self.folder / filename)
            self._mem[filename] = self.loader(self.folder / filename)
        return self._mem[filename]

    def clear(self):
        self._mem.clear()
