"""
Raster grid model
=================
A single-band grid: float cell values (NaN = missing) tied to an affine
transform and a coordinate reference system. Reading and writing go
through rasterio; everything downstream works on the in-memory `Grid`.
"""

from dataclasses import dataclass, replace
from pathlib import Path

import numpy as np
import rasterio
from rasterio.crs import CRS
from rasterio.transform import Affine, array_bounds


@dataclass
class Grid:
    data: np.ndarray      # (rows, cols), NaN = missing
    transform: Affine
    crs: CRS

    @property
    def shape(self):
        return self.data.shape

    @property
    def res(self):
        """Cell size as (x, y), always positive."""
        return abs(self.transform.a), abs(self.transform.e)

    @property
    def bounds(self):
        """(left, bottom, right, top) in grid CRS units."""
        rows, cols = self.shape
        return array_bounds(rows, cols, self.transform)

    def with_data(self, data):
        """Same georeferencing, new cell values."""
        if data.shape != self.shape:
            raise ValueError(f"Shape {data.shape} does not fit grid of shape {self.shape}")
        return replace(self, data=data)

    def valid_count(self):
        return int(np.isfinite(self.data).sum())


def _as_float(band):
    """Promote a masked band to float and fill masked cells with NaN."""
    dtype = np.result_type(band.dtype, np.float32)
    return np.ma.filled(band.astype(dtype), np.nan)


def read_grid(path):
    """
    Read band 1 of a raster file into a `Grid`.

    Nodata cells become NaN. A missing file raises FileNotFoundError
    before rasterio is touched; an unreadable file lets rasterio's
    RasterioIOError propagate.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Raster not found: {path}")

    with rasterio.open(path) as src:
        band = src.read(1, masked=True)
        transform = src.transform
        crs = src.crs

    return Grid(data=_as_float(band), transform=transform, crs=crs)


def write_grid(grid, path):
    """Write a `Grid` as a single-band GeoTIFF with NaN nodata."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = grid.data
    if not np.issubdtype(data.dtype, np.floating):
        data = data.astype(np.float32)

    rows, cols = grid.shape
    with rasterio.open(
        path, "w", driver="GTiff",
        height=rows, width=cols, count=1,
        dtype=data.dtype, crs=grid.crs, transform=grid.transform,
        nodata=np.nan,
    ) as dst:
        dst.write(data, 1)
    return path
