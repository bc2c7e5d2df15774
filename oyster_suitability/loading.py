"""
Input loading: EEZ region polygons, bathymetry and annual SST rasters.
"""

import logging
from pathlib import Path

import geopandas as gpd

from oyster_suitability import config
from oyster_suitability.grid import read_grid

logger = logging.getLogger(__name__)


def load_zones(path=config.ZONES_PATH,
               id_field=config.ZONE_ID_FIELD,
               name_field=config.ZONE_NAME_FIELD,
               nodata=config.ZONE_NODATA):
    """
    Read the region polygons and validate the attributes the zonal step
    relies on.

    Raises
    ------
    FileNotFoundError
        If the vector file does not exist
    KeyError
        If the id or name field is missing
    ValueError
        If ids are duplicated or collide with the rasterisation sentinel
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Zone file not found: {path}")

    zones = gpd.read_file(path)

    missing = [f for f in (id_field, name_field) if f not in zones.columns]
    if missing:
        raise KeyError(f"Zone file missing field(s): {', '.join(missing)}")

    zones[id_field] = zones[id_field].astype(int)
    if zones[id_field].duplicated().any():
        dupes = sorted(zones.loc[zones[id_field].duplicated(), id_field].unique())
        raise ValueError(f"Duplicate zone ids: {dupes}")
    if (zones[id_field] == nodata).any():
        raise ValueError(f"Zone id {nodata} is reserved as the rasterisation nodata value")

    logger.debug("Loaded %d zones from %s (crs=%s)", len(zones), path, zones.crs)
    return zones


def load_bathymetry(path=config.DEPTH_PATH):
    """Bathymetry grid in metres, negative below sea level."""
    return read_grid(path)


def find_sst_files(data_dir=config.DATA_DIR, pattern=config.SST_PATTERN):
    """Sorted SST raster paths matching `pattern`; an empty match is fatal."""
    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        raise NotADirectoryError(f"Data directory not found: {data_dir}")

    paths = sorted(data_dir.glob(pattern))
    if not paths:
        raise FileNotFoundError(f"No SST rasters matching '{pattern}' in {data_dir}")

    logger.debug("SST files: %s", [p.name for p in paths])
    return paths
