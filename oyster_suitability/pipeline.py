"""
Oyster Aquaculture Suitability - US West Coast EEZ
===================================================
Linear pipeline: load -> average SST -> align bathymetry -> threshold ->
mask + zonal sums -> maps and summary table.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from oyster_suitability import config
from oyster_suitability.alignment import (AlignmentError, AlignmentStatus,
                                          align_to, check_alignment, crs_match)
from oyster_suitability.classify import OYSTER, suitability
from oyster_suitability.grid import write_grid
from oyster_suitability.loading import find_sst_files, load_bathymetry, load_zones
from oyster_suitability.plotting import (plot_suitable_cells, plot_zone_choropleth,
                                         render_summary_table, suitable_points)
from oyster_suitability.temporal import kelvin_to_celsius, mean_from_files
from oyster_suitability.zonal import AREA_COL, PCT_COL, join_area_to_zones, suitable_area_by_zone

logger = logging.getLogger(__name__)

POLICIES = ("resample", "strict")
N_STEPS = 7


@dataclass
class AnalysisResult:
    sst_celsius: object
    depth: object
    suitability: object
    summary: object
    zones_area: object
    alignment_before: AlignmentStatus
    outputs: dict = field(default_factory=dict)


def _step(i, msg):
    print(f"\n[{i}/{N_STEPS}] {msg}")


def _align(depth, sst_c, policy):
    """Apply the alignment policy; returns the depth grid on the SST template."""
    status = check_alignment(depth, sst_c)
    print(f"  Bathymetry vs SST grid: {status.report()}")

    if policy == "strict":
        if not status.ok:
            raise AlignmentError(status, "strict alignment policy")
        return depth, status

    aligned = align_to(depth, sst_c)
    post = check_alignment(aligned, sst_c)
    print(f"  After crop + nearest-neighbour resample: {post.report()}")
    if not post.ok:
        raise AlignmentError(post, "after resampling")
    return aligned, status


def run_analysis(zones_path=config.ZONES_PATH,
                 depth_path=config.DEPTH_PATH,
                 data_dir=config.DATA_DIR,
                 sst_pattern=config.SST_PATTERN,
                 output_dir=config.OUTPUT_DIR,
                 criteria=OYSTER,
                 alignment_policy=config.ALIGNMENT_POLICY,
                 target_crs=config.EQUAL_AREA_CRS,
                 id_field=config.ZONE_ID_FIELD,
                 name_field=config.ZONE_NAME_FIELD,
                 key_field=config.ZONE_KEY_FIELD,
                 render=True,
                 basemap=True):
    if alignment_policy not in POLICIES:
        raise ValueError(f"Unknown alignment policy '{alignment_policy}', expected one of {POLICIES}")

    output_dir = Path(output_dir)

    outputs = {
        "mean_sst": output_dir / config.MEAN_SST_PATH.name,
        "suitability": output_dir / config.SUITABILITY_PATH.name,
        "summary_csv": output_dir / config.SUMMARY_CSV.name,
    }

    print("=" * 70)
    print(f"{criteria.name.upper()} AQUACULTURE SUITABILITY - West Coast EEZ")
    print("=" * 70)

    # ------------------------------------------------------------------
    _step(1, "Loading EEZ regions...")
    zones = load_zones(zones_path, id_field=id_field, name_field=name_field)
    print(f"  {len(zones)} region(s): {', '.join(zones[name_field].astype(str))}")

    _step(2, "Loading bathymetry...")
    depth = load_bathymetry(depth_path)
    print(f"  Raster: {depth.shape[1]}x{depth.shape[0]}, res {depth.res[0]:.4g}")

    _step(3, "Averaging annual SST rasters...")
    sst_files = find_sst_files(data_dir, sst_pattern)
    for p in sst_files:
        print(f"  {p.name}")
    mean_k = mean_from_files(sst_files, out_path=outputs["mean_sst"])
    sst_c = kelvin_to_celsius(mean_k)
    print(f"  Mean SST saved: {outputs['mean_sst']}")
    if sst_c.valid_count():
        print(f"  SST range: {np.nanmin(sst_c.data):.1f} to {np.nanmax(sst_c.data):.1f} C")

    # ------------------------------------------------------------------
    _step(4, "Checking coordinate systems and grids...")
    crs_ok = crs_match(zones, depth, sst_c)
    print(f"  CRS (regions, bathymetry, SST): {'all match' if crs_ok else 'not match'}")
    depth, status_before = _align(depth, sst_c, alignment_policy)

    # ------------------------------------------------------------------
    _step(5, f"Classifying suitability ({criteria.name})...")
    lo, hi = criteria.sst_range
    print(f"  SST:   {lo} to {hi} C")
    lo, hi = criteria.depth_range
    print(f"  Depth: {lo} to {hi} m")
    suitable = suitability(sst_c, depth, criteria)
    write_grid(suitable, outputs["suitability"])
    print(f"  Suitable cells: {suitable.valid_count():,} of {suitable.data.size:,}")

    # ------------------------------------------------------------------
    _step(6, f"Summing suitable area per region ({target_crs})...")
    summary = suitable_area_by_zone(suitable, zones, id_field=id_field,
                                    name_field=name_field, key_field=key_field,
                                    target_crs=target_crs)
    zones_area = join_area_to_zones(zones, summary, name_field=name_field)
    output_dir.mkdir(parents=True, exist_ok=True)
    summary.to_csv(outputs["summary_csv"], index=False)
    print(f"  Summary saved: {outputs['summary_csv']}")

    # ------------------------------------------------------------------
    _step(7, "Rendering maps and table...")
    if render:
        points = suitable_points(suitable)
        outputs["suitable_map"] = plot_suitable_cells(
            points, zones, output_dir / config.SUITABLE_MAP_PNG.name,
            species=criteria.name, basemap=basemap)
        outputs["choropleth"] = plot_zone_choropleth(
            zones_area, points, output_dir / config.CHOROPLETH_PNG.name,
            species=criteria.name, name_field=name_field, basemap=basemap)
        outputs["table"] = render_summary_table(
            summary, output_dir / config.SUMMARY_TABLE_PNG.name,
            species=criteria.name, name_field=name_field)
        for key in ("suitable_map", "choropleth", "table"):
            print(f"  Saved: {outputs[key]}")
    else:
        print("  Skipped")

    # ------------------------------------------------------------------
    print("\n" + "=" * 70)
    print("FULL SUMMARY REPORT")
    print("=" * 70)
    print(f"\n  {'Region':<24} {'Suitable km2':>14} {'% region':>10}")
    print(f"  {'-' * 50}")
    for _, row in summary.iterrows():
        print(f"  {str(row[name_field]):<24} {row[AREA_COL]:>14,.1f} {row[PCT_COL]:>9.2f}%")
    print(f"  {'-' * 50}")
    print(f"  {'TOTAL':<24} {summary[AREA_COL].sum():>14,.1f}")
    print("\nAnalysis complete.")
    logger.info("Outputs: %s", {k: str(v) for k, v in outputs.items()})

    return AnalysisResult(
        sst_celsius=sst_c, depth=depth, suitability=suitable,
        summary=summary, zones_area=zones_area,
        alignment_before=status_before, outputs=outputs,
    )


def main():
    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    run_analysis()
    return 0
