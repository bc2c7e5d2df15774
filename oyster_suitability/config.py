"""Hard-coded analysis constants: paths, thresholds, projections and styling."""

from pathlib import Path

# ============================================================================
# PATHS
# ============================================================================
# data/ and outputs/ resolve against the directory the analysis is run from
BASE_DIR = Path.cwd()

DATA_DIR    = BASE_DIR / "data"
ZONES_PATH  = DATA_DIR / "wc_regions_clean.shp"
DEPTH_PATH  = DATA_DIR / "depth.tif"
SST_PATTERN = "average_annual_sst_*.tif"

OUTPUT_DIR        = BASE_DIR / "outputs"
MEAN_SST_PATH     = OUTPUT_DIR / "mean_sst_kelvin.tif"
SUITABILITY_PATH  = OUTPUT_DIR / "oyster_suitability.tif"
SUMMARY_CSV       = OUTPUT_DIR / "suitable_area_by_region.csv"
SUITABLE_MAP_PNG  = OUTPUT_DIR / "oyster_suitable_cells.png"
CHOROPLETH_PNG    = OUTPUT_DIR / "oyster_suitable_area_by_region.png"
SUMMARY_TABLE_PNG = OUTPUT_DIR / "oyster_suitable_area_table.png"

# ============================================================================
# ZONES (West Coast EEZ regions)
# ============================================================================
ZONE_ID_FIELD   = "rgn_id"
ZONE_NAME_FIELD = "rgn"
ZONE_KEY_FIELD  = "rgn_key"
ZONE_NODATA     = 0   # burn value for cells outside every region

# ============================================================================
# SUITABILITY CRITERIA (oyster)
# ============================================================================
SST_MIN_C   = 3      # degrees Celsius, inclusive
SST_MAX_C   = 19
DEPTH_MIN_M = -360   # metres (negative = below sea level), inclusive
DEPTH_MAX_M = 0

KELVIN_OFFSET = 273.15
M2_PER_KM2    = 1_000_000

# ============================================================================
# PROJECTIONS / ALIGNMENT
# ============================================================================
EQUAL_AREA_CRS = "EPSG:5070"   # NAD83 / Conus Albers

# "resample": crop + resample always run, the pre-check is only reported
# "strict":   any mismatch between bathymetry and SST grids is fatal
ALIGNMENT_POLICY = "resample"

# ============================================================================
# PRESENTATION
# ============================================================================
BASEMAP_PROVIDER = "CartoDB.Positron"
FIG_DPI          = 300

COLOR_SUITABLE = "#E0A526"
COLOR_ZONE_EDGE = "#1E5AA8"
COLOR_HEADER    = "#0d1b2a"
CHOROPLETH_CMAP = "YlGnBu"
