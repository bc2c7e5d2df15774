"""
Unit tests for grid I/O and input loading.
"""

import numpy as np
import pytest
import rasterio
from rasterio.transform import from_origin

from oyster_suitability.grid import read_grid, write_grid
from oyster_suitability.loading import find_sst_files, load_bathymetry, load_zones


def test_grid_geometry(make_grid):
    grid = make_grid(np.zeros((3, 4)), left=100.0, top=3000.0)
    assert grid.shape == (3, 4)
    assert grid.res == (1000.0, 1000.0)
    assert grid.bounds == pytest.approx((100.0, 0.0, 4100.0, 3000.0))


def test_with_data_rejects_wrong_shape(make_grid):
    grid = make_grid(np.zeros((3, 3)))
    with pytest.raises(ValueError):
        grid.with_data(np.zeros((2, 2)))


def test_read_grid_nodata_becomes_nan(tmp_path):
    path = tmp_path / "depth.tif"
    data = np.array([[-10, -9999], [-20, -30]], dtype=np.int16)
    with rasterio.open(path, "w", driver="GTiff", height=2, width=2, count=1,
                       dtype="int16", crs="EPSG:5070", nodata=-9999,
                       transform=from_origin(0, 2000, 1000, 1000)) as dst:
        dst.write(data, 1)

    grid = read_grid(path)

    assert np.issubdtype(grid.data.dtype, np.floating)
    assert np.isnan(grid.data[0, 1])
    assert grid.data[1, 1] == -30
    assert grid.valid_count() == 3


def test_write_then_read_keeps_georeferencing(tmp_path, make_grid):
    grid = make_grid([[1.0, np.nan], [3.0, 4.0]])
    path = write_grid(grid, tmp_path / "out" / "grid.tif")

    back = read_grid(path)

    assert back.transform == grid.transform
    assert back.crs.to_epsg() == 5070
    np.testing.assert_array_equal(back.data, grid.data)


def test_read_grid_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_grid(tmp_path / "nope.tif")


def test_load_bathymetry(tmp_path, write_tif):
    path = write_tif(tmp_path / "depth.tif", [[-5.0, -50.0]])
    depth = load_bathymetry(path)
    np.testing.assert_array_equal(depth.data, [[-5.0, -50.0]])


def test_load_zones(zones_file):
    zones = load_zones(zones_file)
    assert len(zones) == 2
    assert set(zones["rgn"]) == {"Zone A", "Zone B"}


def test_load_zones_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_zones(tmp_path / "missing.shp")


def test_load_zones_missing_field(zones_file):
    with pytest.raises(KeyError):
        load_zones(zones_file, name_field="region_name")


def test_load_zones_duplicate_ids(tmp_path, zones):
    zones["rgn_id"] = [3, 3]
    path = tmp_path / "dupes.gpkg"
    zones.to_file(path, driver="GPKG")
    with pytest.raises(ValueError, match="Duplicate"):
        load_zones(path)


def test_load_zones_reserved_id(tmp_path, zones):
    zones["rgn_id"] = [0, 1]
    path = tmp_path / "reserved.gpkg"
    zones.to_file(path, driver="GPKG")
    with pytest.raises(ValueError, match="reserved"):
        load_zones(path)


def test_find_sst_files_sorted(tmp_path, write_tif):
    for year in (2010, 2008, 2009):
        write_tif(tmp_path / f"average_annual_sst_{year}.tif", [[280.0]])
    write_tif(tmp_path / "depth.tif", [[-1.0]])

    paths = find_sst_files(tmp_path, "average_annual_sst_*.tif")

    assert [p.name for p in paths] == [
        "average_annual_sst_2008.tif",
        "average_annual_sst_2009.tif",
        "average_annual_sst_2010.tif",
    ]


def test_find_sst_files_none_found(tmp_path):
    with pytest.raises(FileNotFoundError):
        find_sst_files(tmp_path, "average_annual_sst_*.tif")


def test_find_sst_files_missing_dir(tmp_path):
    with pytest.raises(NotADirectoryError):
        find_sst_files(tmp_path / "absent")
