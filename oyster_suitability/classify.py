"""
Suitability classification
==========================
Closed-interval thresholds turn each aligned grid into {0, 1, NaN};
the binary grids are combined by multiplication (logical AND) and
unsuitable cells are recoded to NaN so only suitable cells remain.
"""

from dataclasses import dataclass

import numpy as np

from oyster_suitability import config
from oyster_suitability.alignment import ensure_aligned


@dataclass(frozen=True)
class SpeciesCriteria:
    name: str
    sst_range: tuple     # (min, max) degrees C, inclusive
    depth_range: tuple   # (min, max) metres, inclusive

    def __post_init__(self):
        for label, (lo, hi) in (("sst_range", self.sst_range),
                                ("depth_range", self.depth_range)):
            if lo > hi:
                raise ValueError(f"{label} lower bound {lo} exceeds upper bound {hi}")


OYSTER = SpeciesCriteria(
    name="Oyster",
    sst_range=(config.SST_MIN_C, config.SST_MAX_C),
    depth_range=(config.DEPTH_MIN_M, config.DEPTH_MAX_M),
)


def classify_range(grid, low, high):
    """1 where low <= value <= high, 0 elsewhere, NaN where input is NaN."""
    values = grid.data
    with np.errstate(invalid="ignore"):
        inside = (values >= low) & (values <= high)
    out = np.where(inside, 1.0, 0.0)
    out[np.isnan(values)] = np.nan
    return grid.with_data(out)


def combine(*masks):
    """
    Elementwise product of binary grids, then 0 -> NaN.

    A cell missing in any input stays missing; the result only holds
    1 (suitable everywhere) or NaN.
    """
    ensure_aligned(*masks)
    product = np.ones(masks[0].shape, dtype=np.float64)
    for m in masks:
        product = product * m.data
    product[product == 0] = np.nan
    return masks[0].with_data(product)


def suitability(sst_c, depth, criteria=OYSTER):
    """Combined suitability of an SST (Celsius) grid and an aligned depth grid."""
    sst_ok = classify_range(sst_c, *criteria.sst_range)
    depth_ok = classify_range(depth, *criteria.depth_range)
    return combine(sst_ok, depth_ok)
