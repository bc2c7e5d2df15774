"""
Zonal aggregation
=================
Suitable area per EEZ region: reproject to an equal-area CRS, mask to the
regions, burn region ids, compute per-cell areas and sum them by region.
"""

import logging

import numpy as np
import pandas as pd
from pyproj import CRS as ProjCRS
from rasterio.crs import CRS
from rasterio.enums import Resampling
from rasterio.features import rasterize
from rasterio.warp import calculate_default_transform, reproject
from shapely.geometry import mapping

from oyster_suitability import config
from oyster_suitability.alignment import AlignmentError, AlignmentStatus, crs_equal
from oyster_suitability.grid import Grid

logger = logging.getLogger(__name__)

AREA_COL = "suitable_area_km2"
PCT_COL = "pct_suitable"
ZONE_AREA_COL = "zone_area_km2"


# ============================================================================
# Reprojection
# ============================================================================
def reproject_grid(grid, dst_crs, resampling=Resampling.nearest):
    """Warp `grid` into `dst_crs`; a grid already in that CRS is returned as is."""
    if crs_equal(grid.crs, dst_crs):
        return grid

    dst_crs = CRS.from_user_input(dst_crs)
    rows, cols = grid.shape
    transform, width, height = calculate_default_transform(
        grid.crs, dst_crs, cols, rows, *grid.bounds)

    dest = np.full((height, width), np.nan, dtype=np.float64)
    reproject(
        source=grid.data.astype(np.float64),
        destination=dest,
        src_transform=grid.transform,
        src_crs=grid.crs,
        src_nodata=np.nan,
        dst_transform=transform,
        dst_crs=dst_crs,
        dst_nodata=np.nan,
        resampling=resampling,
    )
    return Grid(data=dest, transform=transform, crs=dst_crs)


def zones_to_crs(zones, crs):
    if zones.crs is None:
        raise ValueError("Zone polygons have no CRS")
    if crs_equal(zones.crs, crs):
        return zones
    return zones.to_crs(ProjCRS.from_user_input(crs))


# ============================================================================
# Masks, zone ids, cell areas
# ============================================================================
def zone_mask(zones, grid):
    """Boolean array, True for cells whose centre falls inside any zone."""
    zones = zones_to_crs(zones, grid.crs)
    shapes = [(mapping(geom), 1) for geom in zones.geometry
              if geom is not None and not geom.is_empty]
    if not shapes:
        return np.zeros(grid.shape, dtype=bool)
    return rasterize(
        shapes, out_shape=grid.shape, transform=grid.transform,
        fill=0, dtype=np.uint8,
    ).astype(bool)


def mask_to_zones(grid, zones):
    """Cells outside every zone become NaN."""
    inside = zone_mask(zones, grid)
    return grid.with_data(np.where(inside, grid.data, np.nan))


def rasterize_zones(zones, grid, id_field=config.ZONE_ID_FIELD,
                    nodata=config.ZONE_NODATA):
    """Burn each zone's id onto the grid template; `nodata` elsewhere."""
    zones = zones_to_crs(zones, grid.crs)
    shapes = [(mapping(geom), int(zid))
              for geom, zid in zip(zones.geometry, zones[id_field])
              if geom is not None and not geom.is_empty]
    if not shapes:
        return np.full(grid.shape, nodata, dtype=np.int32)
    return rasterize(
        shapes, out_shape=grid.shape, transform=grid.transform,
        fill=nodata, dtype=np.int32,
    )


def cell_area_grid(grid):
    """
    Area of every cell in m2. Projected grids use |a * e|; geographic
    grids use the geodesic area of each row's cells on the CRS ellipsoid.
    """
    t = grid.transform
    rows, cols = grid.shape
    crs = ProjCRS.from_user_input(grid.crs)

    if not crs.is_geographic:
        area = np.full(grid.shape, abs(t.a * t.e), dtype=np.float64)
        return grid.with_data(area)

    geod = crs.get_geod()
    x0, x1 = t.c, t.c + t.a
    row_area = np.empty(rows, dtype=np.float64)
    for r in range(rows):
        y0 = t.f + r * t.e
        y1 = y0 + t.e
        a, _ = geod.polygon_area_perimeter([x0, x1, x1, x0], [y0, y0, y1, y1])
        row_area[r] = abs(a)
    area = np.broadcast_to(row_area[:, np.newaxis], (rows, cols)).copy()
    return grid.with_data(area)


# ============================================================================
# Zonal statistics
# ============================================================================
def zonal_sum(values, zone_ids, zone_list=None, nodata=config.ZONE_NODATA):
    """
    Sum finite `values` cells grouped by `zone_ids`. Every id in
    `zone_list` appears in the result; ids with no contributing cells
    get 0.0.
    """
    data = values.data if isinstance(values, Grid) else values
    if data.shape != zone_ids.shape:
        raise AlignmentError(AlignmentStatus.EXTENT_MISMATCH,
                             f"value grid {data.shape} vs zone grid {zone_ids.shape}")

    keep = np.isfinite(data) & (zone_ids != nodata)
    sums = pd.Series(data[keep]).groupby(zone_ids[keep]).sum()

    if zone_list is not None:
        sums = sums.reindex(pd.Index(zone_list), fill_value=0.0)
    return sums.astype(float)


def suitable_area_by_zone(suitable, zones,
                          id_field=config.ZONE_ID_FIELD,
                          name_field=config.ZONE_NAME_FIELD,
                          key_field=config.ZONE_KEY_FIELD,
                          target_crs=config.EQUAL_AREA_CRS,
                          nodata=config.ZONE_NODATA):
    """
    One row per zone: id, key (when the zones carry `key_field`), name,
    suitable area (km2), zone area (km2) and the suitable share of the
    zone. Keys and names are attached by id, never by row position.
    """
    grid_ea = reproject_grid(suitable, target_crs)
    zones_ea = zones_to_crs(zones, target_crs)

    masked = mask_to_zones(grid_ea, zones_ea)
    zone_ids = rasterize_zones(zones_ea, masked, id_field=id_field, nodata=nodata)

    area = cell_area_grid(masked)
    suitable_area = np.where(masked.data == 1, area.data, np.nan)

    sums_m2 = zonal_sum(suitable_area, zone_ids,
                        zone_list=zones_ea[id_field].tolist(), nodata=nodata)
    logger.debug("Zonal sums (m2): %s", sums_m2.to_dict())

    names = zones_ea.set_index(id_field)[name_field]
    zone_area = (zones_ea.geometry.area / config.M2_PER_KM2).to_numpy()
    zone_area = pd.Series(zone_area, index=zones_ea[id_field].to_numpy())

    summary = pd.DataFrame({
        id_field: sums_m2.index,
        name_field: names.reindex(sums_m2.index).to_numpy(),
        AREA_COL: sums_m2.to_numpy() / config.M2_PER_KM2,
        ZONE_AREA_COL: zone_area.reindex(sums_m2.index).to_numpy(),
    })
    if key_field in zones_ea.columns:
        keys = zones_ea.set_index(id_field)[key_field]
        summary.insert(1, key_field, keys.reindex(sums_m2.index).to_numpy())
    with np.errstate(divide="ignore", invalid="ignore"):
        summary[PCT_COL] = np.where(summary[ZONE_AREA_COL] > 0,
                                    summary[AREA_COL] / summary[ZONE_AREA_COL] * 100,
                                    0.0)
    return summary


def join_area_to_zones(zones, summary, name_field=config.ZONE_NAME_FIELD):
    """
    Attach per-zone areas to the polygons by zone name. Any name present
    on one side only is an error.
    """
    cols = [name_field, AREA_COL, PCT_COL]
    merged = zones.merge(summary[cols], on=name_field, how="outer",
                         indicator=True, validate="one_to_one")
    unmatched = merged.loc[merged["_merge"] != "both", name_field].tolist()
    if unmatched:
        raise KeyError(f"Zone names without a match between polygons and summary: {unmatched}")
    return merged.drop(columns="_merge")
