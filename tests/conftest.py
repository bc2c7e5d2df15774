"""
Shared fixtures: small synthetic grids in an equal-area CRS with 1 km
cells, and two rectangular zones laid on cell edges.
"""

import matplotlib
matplotlib.use("Agg")

import geopandas as gpd
import numpy as np
import pytest
from rasterio.crs import CRS
from rasterio.transform import from_origin
from shapely.geometry import box

from oyster_suitability.grid import Grid, write_grid

CELL = 1000.0
EA_CRS = CRS.from_epsg(5070)


@pytest.fixture
def make_grid():
    """Factory: values -> Grid with top-left corner (left, top)."""
    def _make(values, left=0.0, top=3000.0, res=CELL, crs=EA_CRS):
        values = np.asarray(values, dtype=np.float64)
        return Grid(data=values, transform=from_origin(left, top, res, res), crs=crs)
    return _make


@pytest.fixture
def write_tif(make_grid):
    """Factory: write values as a GeoTIFF and return the path."""
    def _write(path, values, **kwargs):
        return write_grid(make_grid(values, **kwargs), path)
    return _write


@pytest.fixture
def zones():
    """
    Zone A covers rows 0-1 / cols 0-1 of a 3x3 grid at origin (0, 3000),
    zone B covers col 2. Row 2, cols 0-1 lie outside both.
    """
    return gpd.GeoDataFrame(
        {
            "rgn_id": [1, 2],
            "rgn": ["Zone A", "Zone B"],
            "rgn_key": ["A", "B"],
        },
        geometry=[box(0, 1000, 2000, 3000), box(2000, 0, 3000, 3000)],
        crs="EPSG:5070",
    )


@pytest.fixture
def zones_file(tmp_path, zones):
    path = tmp_path / "zones.gpkg"
    zones.to_file(path, driver="GPKG")
    return path
