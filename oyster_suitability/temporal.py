"""
Annual SST rasters -> one mean grid, Kelvin -> Celsius.
"""

import logging
import warnings

import numpy as np

from oyster_suitability import config
from oyster_suitability.alignment import ensure_aligned
from oyster_suitability.grid import read_grid, write_grid

logger = logging.getLogger(__name__)


def stack_grids(grids):
    """(n, rows, cols) array of grids that share one template."""
    if not grids:
        raise ValueError("No grids to stack")
    ensure_aligned(*grids)
    return np.stack([g.data for g in grids], axis=0)


def mean_grid(grids):
    """
    Cellwise mean across `grids`, ignoring NaN. A cell is NaN only when
    every input is NaN there.
    """
    stack = stack_grids(grids)
    with warnings.catch_warnings():
        # all-NaN cells: "Mean of empty slice"
        warnings.simplefilter("ignore", category=RuntimeWarning)
        mean = np.nanmean(stack, axis=0)
    return grids[0].with_data(mean)


def mean_from_files(paths, out_path=None):
    """
    Read every path (any unreadable file aborts the whole aggregation),
    average them and optionally persist the result in source units.
    """
    grids = [read_grid(p) for p in paths]
    mean = mean_grid(grids)
    logger.debug("Averaged %d rasters, %d valid cells", len(grids), mean.valid_count())

    if out_path is not None:
        write_grid(mean, out_path)
    return mean


def kelvin_to_celsius(grid, offset=config.KELVIN_OFFSET):
    """Subtract 273.15 from every cell; NaN stays NaN."""
    return grid.with_data(grid.data - offset)
