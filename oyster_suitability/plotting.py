"""
Maps and summary table
======================
(a) suitable cells over a basemap, (b) region choropleth of suitable
area with the suitable cells overlaid, (c) region vs area table.
"""

import logging
from pathlib import Path

import contextily as ctx
import geopandas as gpd
import matplotlib
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
from matplotlib.colors import BoundaryNorm
from matplotlib.lines import Line2D
import numpy as np
import requests
from pyproj import CRS as ProjCRS
from rasterio.transform import xy

from oyster_suitability import config
from oyster_suitability.zonal import AREA_COL, PCT_COL, zones_to_crs

logger = logging.getLogger(__name__)

SOURCE_NOTE = ("Data: GEBCO bathymetry | NOAA CoralTemp annual SST | "
               "EEZ regions: US West Coast | Area computed in EPSG:5070")


def suitable_points(grid):
    """Cell centres where the suitability grid equals 1, as points."""
    rows, cols = np.nonzero(grid.data == 1)
    if rows.size:
        xs, ys = xy(grid.transform, rows, cols, offset="center")
    else:
        xs, ys = [], []
    return gpd.GeoDataFrame(
        {"row": rows, "col": cols},
        geometry=gpd.points_from_xy(np.asarray(xs), np.asarray(ys)),
        crs=ProjCRS.from_user_input(grid.crs),
    )


def choropleth_breaks(values):
    """
    Sorted unique finite values as bin edges, plus one edge above the
    maximum, so every distinct area gets its own colour class.
    """
    vals = np.asarray(values, dtype=float)
    uniq = np.unique(vals[np.isfinite(vals)])
    if uniq.size == 0:
        raise ValueError("No finite values to derive breaks from")
    return np.append(uniq, uniq[-1] + 1.0)


def add_basemap(ax, crs, provider=config.BASEMAP_PROVIDER):
    """
    Draw web tiles under the current axes. A network failure leaves the
    map without a basemap; returns whether tiles were drawn.
    """
    source = ctx.providers.query_name(provider)
    try:
        ctx.add_basemap(ax, crs=ProjCRS.from_user_input(crs).to_string(),
                        source=source, attribution_size=6)
    except requests.exceptions.RequestException as exc:
        logger.warning("Basemap fetch failed (%s): %s", provider, exc)
        print(f"  Basemap unavailable, continuing without it ({exc.__class__.__name__})")
        return False
    return True


def _frame(ax, zones, pad_frac=0.05):
    minx, miny, maxx, maxy = zones.total_bounds
    pad = pad_frac * max(maxx - minx, maxy - miny)
    ax.set_xlim(minx - pad, maxx + pad)
    ax.set_ylim(miny - pad, maxy + pad)
    if ProjCRS.from_user_input(zones.crs).is_geographic:
        xlabel, ylabel = "Longitude", "Latitude"
    else:
        xlabel, ylabel = "Easting (m)", "Northing (m)"
    ax.set_xlabel(xlabel, fontsize=11, labelpad=8)
    ax.set_ylabel(ylabel, fontsize=11, labelpad=8)
    ax.tick_params(labelsize=9)
    ax.grid(True, linestyle=":", alpha=0.3, color="#666666")


def _finish(fig, ax, out_png):
    ax.annotate(SOURCE_NOTE, xy=(0.5, -0.08), xycoords="axes fraction",
                ha="center", fontsize=7.5, color="#666666", style="italic")
    out_png = Path(out_png)
    out_png.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_png, dpi=config.FIG_DPI, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    return out_png


# ============================================================================
# (a) Suitable cells
# ============================================================================
def plot_suitable_cells(points, zones, out_png, species="Oyster",
                        basemap=True, provider=config.BASEMAP_PROVIDER):
    points = zones_to_crs(points, zones.crs)

    fig, ax = plt.subplots(1, 1, figsize=(11, 14), facecolor="white")
    zones.boundary.plot(ax=ax, color=config.COLOR_ZONE_EDGE, linewidth=1.2,
                        linestyle="--", zorder=3)
    if len(points):
        points.plot(ax=ax, color=config.COLOR_SUITABLE, markersize=2,
                    alpha=0.8, zorder=4)
    _frame(ax, zones)
    if basemap:
        add_basemap(ax, zones.crs, provider=provider)

    ax.set_title(f"Suitable {species} Aquaculture Cells -- West Coast EEZ",
                 fontsize=17, fontweight="bold", pad=16, color="#1A1A2E")
    legend_elements = [
        Line2D([0], [0], marker="o", color="w", markerfacecolor=config.COLOR_SUITABLE,
               markersize=7, label=f"Suitable cell (n={len(points):,})"),
        Line2D([0], [0], color=config.COLOR_ZONE_EDGE, linewidth=1.2, linestyle="--",
               label="EEZ region boundary"),
    ]
    ax.legend(handles=legend_elements, loc="lower left", fontsize=9,
              framealpha=0.92, edgecolor="#CCCCCC", fancybox=True)
    return _finish(fig, ax, out_png)


# ============================================================================
# (b) Choropleth
# ============================================================================
def plot_zone_choropleth(zones_area, points, out_png, species="Oyster",
                         name_field=config.ZONE_NAME_FIELD,
                         basemap=True, provider=config.BASEMAP_PROVIDER):
    breaks = choropleth_breaks(zones_area[AREA_COL])
    n_bins = len(breaks) - 1
    cmap = matplotlib.colormaps[config.CHOROPLETH_CMAP].resampled(n_bins)
    norm = BoundaryNorm(breaks, n_bins)
    face = cmap(norm(zones_area[AREA_COL].to_numpy(dtype=float)))

    points = zones_to_crs(points, zones_area.crs)

    fig, ax = plt.subplots(1, 1, figsize=(11, 14), facecolor="white")
    zones_area.plot(ax=ax, color=face, edgecolor="#333333", linewidth=0.8,
                    alpha=0.75, zorder=2)
    if len(points):
        points.plot(ax=ax, color=config.COLOR_SUITABLE, markersize=1.5,
                    alpha=0.9, zorder=4)

    for _, row in zones_area.iterrows():
        pt = row.geometry.representative_point()
        ax.annotate(row[name_field], xy=(pt.x, pt.y), ha="center", va="center",
                    fontsize=9, fontweight="bold", color="#1A1A2E", zorder=5)

    _frame(ax, zones_area)
    if basemap:
        add_basemap(ax, zones_area.crs, provider=provider)

    sm = plt.cm.ScalarMappable(norm=norm, cmap=cmap)
    sm.set_array([])
    cbar = fig.colorbar(sm, ax=ax, shrink=0.55, aspect=25, pad=0.02,
                        label="Suitable area (km2)")
    cbar.set_ticks(breaks[:-1])
    cbar.set_ticklabels([f"{b:,.0f}" for b in breaks[:-1]])
    cbar.ax.tick_params(labelsize=8)

    ax.set_title(f"Suitable {species} Area by EEZ Region",
                 fontsize=17, fontweight="bold", pad=16, color="#1A1A2E")
    legend_elements = [
        Line2D([0], [0], marker="o", color="w", markerfacecolor=config.COLOR_SUITABLE,
               markersize=7, label="Suitable cell"),
        mpatches.Patch(facecolor=cmap(0), edgecolor="#333333", label="EEZ region"),
    ]
    ax.legend(handles=legend_elements, loc="lower left", fontsize=9,
              framealpha=0.92, edgecolor="#CCCCCC", fancybox=True)
    return _finish(fig, ax, out_png)


# ============================================================================
# (c) Summary table
# ============================================================================
def render_summary_table(summary, out_png, species="Oyster",
                         name_field=config.ZONE_NAME_FIELD):
    col_labels = ["EEZ Region", "Suitable area (km2)", "% of region"]
    row_data = [[row[name_field], f"{row[AREA_COL]:,.1f}", f"{row[PCT_COL]:.2f}%"]
                for _, row in summary.iterrows()]
    row_data.append(["TOTAL", f"{summary[AREA_COL].sum():,.1f}", "--"])

    fig, ax = plt.subplots(1, 1, figsize=(8, 0.5 * len(row_data) + 1.5),
                           facecolor="white")
    ax.axis("off")
    table = ax.table(cellText=row_data, colLabels=col_labels,
                     loc="upper center", cellLoc="center",
                     colWidths=[0.45, 0.30, 0.25])
    table.auto_set_font_size(False)
    table.set_fontsize(9)
    table.scale(1.0, 1.6)

    for j in range(len(col_labels)):
        cell = table[0, j]
        cell.set_facecolor(config.COLOR_HEADER)
        cell.set_text_props(color="white", fontweight="bold")
        cell.set_edgecolor("#34495e")

    for i in range(1, len(row_data) + 1):
        for j in range(len(col_labels)):
            cell = table[i, j]
            cell.set_edgecolor("#dfe6e9")
            if i == len(row_data):
                cell.set_facecolor("#d5f5e3")
                cell.set_text_props(fontweight="bold")
            elif i % 2 == 0:
                cell.set_facecolor("#f8f9fa")

    ax.set_title(f"Suitable {species} Aquaculture Area by EEZ Region",
                 fontsize=13, fontweight="bold", pad=10)

    out_png = Path(out_png)
    out_png.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_png, dpi=config.FIG_DPI, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    return out_png
