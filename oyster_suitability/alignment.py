"""
Grid alignment
==============
Structural comparison of grids (CRS, resolution, extent) and the crop +
nearest-neighbour resample that puts bathymetry on the SST grid.
"""

import logging
from enum import Enum

import numpy as np
from pyproj import CRS as ProjCRS
from rasterio.enums import Resampling
from rasterio.transform import Affine
from rasterio.warp import reproject, transform_bounds

from oyster_suitability.grid import Grid

logger = logging.getLogger(__name__)


class AlignmentStatus(Enum):
    ALIGNED = "aligned"
    CRS_MISMATCH = "crs-mismatch"
    EXTENT_MISMATCH = "extent-mismatch"
    RESOLUTION_MISMATCH = "resolution-mismatch"

    @property
    def ok(self):
        return self is AlignmentStatus.ALIGNED

    def report(self):
        """Console wording used by the pipeline."""
        return "all match" if self.ok else f"not match ({self.value})"


class AlignmentError(ValueError):
    """Grids that must be combined cellwise do not share one grid template."""

    def __init__(self, status, detail=""):
        self.status = status
        msg = f"Grids are not aligned: {status.value}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)


# ============================================================================
# CRS comparison
# ============================================================================
def crs_equal(a, b):
    """Equivalence of two CRS-like values (rasterio, pyproj, EPSG strings)."""
    if a is None or b is None:
        return a is None and b is None
    return ProjCRS.from_user_input(a) == ProjCRS.from_user_input(b)


def crs_match(*sources):
    """
    True when every source (anything with a `.crs`, e.g. a Grid or a
    GeoDataFrame) shares one CRS. Reports a single pass/fail, not which
    pair differs.
    """
    crss = [s.crs for s in sources]
    return all(crs_equal(crss[i], crss[j])
               for i in range(len(crss)) for j in range(i + 1, len(crss)))


# ============================================================================
# Structural check
# ============================================================================
def check_alignment(grid, template, tolerance=1e-6):
    """
    Compare CRS, resolution, then extent and shape of `grid` against
    `template`. `tolerance` is a fraction of the template cell size.
    """
    if not crs_equal(grid.crs, template.crs):
        return AlignmentStatus.CRS_MISMATCH

    atol = tolerance * min(template.res)
    if not np.allclose(grid.res, template.res, rtol=0, atol=atol):
        return AlignmentStatus.RESOLUTION_MISMATCH

    if grid.shape != template.shape or not np.allclose(
            grid.bounds, template.bounds, rtol=0, atol=atol):
        return AlignmentStatus.EXTENT_MISMATCH

    return AlignmentStatus.ALIGNED


def ensure_aligned(*grids):
    """Raise AlignmentError unless every grid matches the first one."""
    first = grids[0]
    for i, g in enumerate(grids[1:], start=1):
        status = check_alignment(g, first)
        if not status.ok:
            raise AlignmentError(status, f"grid {i} vs grid 0")


# ============================================================================
# Crop / resample
# ============================================================================
def crop_to_extent(grid, bounds, snap_eps=1e-9):
    """
    Restrict `grid` to the cells covering `bounds` (left, bottom, right, top),
    snapping outward to whole cells. Raises ValueError if nothing overlaps.
    """
    left, bottom, right, top = bounds
    inv = ~grid.transform
    c0, r0 = inv @ (left, top)
    c1, r1 = inv @ (right, bottom)

    rows, cols = grid.shape
    col_start = max(int(np.floor(min(c0, c1) + snap_eps)), 0)
    col_stop = min(int(np.ceil(max(c0, c1) - snap_eps)), cols)
    row_start = max(int(np.floor(min(r0, r1) + snap_eps)), 0)
    row_stop = min(int(np.ceil(max(r0, r1) - snap_eps)), rows)

    if col_stop <= col_start or row_stop <= row_start:
        raise ValueError(f"Extent {tuple(bounds)} does not overlap grid bounds {grid.bounds}")

    data = grid.data[row_start:row_stop, col_start:col_stop].copy()
    transform = grid.transform @ Affine.translation(col_start, row_start)
    return Grid(data=data, transform=transform, crs=grid.crs)


def resample_to_template(grid, template, resampling=Resampling.nearest):
    """Warp `grid` onto the exact origin, resolution and shape of `template`."""
    dest = np.full(template.shape, np.nan, dtype=np.float64)
    reproject(
        source=grid.data.astype(np.float64),
        destination=dest,
        src_transform=grid.transform,
        src_crs=grid.crs,
        src_nodata=np.nan,
        dst_transform=template.transform,
        dst_crs=template.crs,
        dst_nodata=np.nan,
        resampling=resampling,
    )
    return Grid(data=dest, transform=template.transform, crs=template.crs)


def align_to(grid, template, resampling=Resampling.nearest):
    """
    Crop `grid` to the template extent, then resample onto the template
    grid. Template bounds are transformed first when the CRSs differ.
    """
    bounds = template.bounds
    if not crs_equal(grid.crs, template.crs):
        bounds = transform_bounds(template.crs, grid.crs, *bounds)
        logger.debug("Template bounds in source CRS: %s", bounds)

    cropped = crop_to_extent(grid, bounds)
    return resample_to_template(cropped, template, resampling=resampling)
