"""Internal constants shared across the library."""

USER_AGENT = "pylbs-import"

COLLECTION_NAME = "lbs"
DEFAULT_RADIO_TYPE = "gsm"

#: Sphere radius used for accuracy distances (WGS84 equatorial radius).
EARTH_RADIUS_M = 6378137.0

# ------------------------------------------------------------------
# Tower key field widths
# ------------------------------------------------------------------

UINT16_MAX = 0xFFFF
UINT32_MAX = 0xFFFFFFFF
INT32_MAX = 0x7FFFFFFF

# ------------------------------------------------------------------
# OpenCellID / Mozilla Location Service CSV column positions
# ------------------------------------------------------------------

COL_RADIO = 0
COL_MCC = 1
COL_MNC = 2
COL_LAC = 3
COL_CELL = 4
COL_LON = 6
COL_LAT = 7
COL_RANGE = 8
COL_SAMPLES = 9

#: Dataset names containing this marker are applied incrementally.
INCREMENTAL_MARKER = "diff"

DEFAULT_BATCH_SIZE = 1000
DEFAULT_PROGRESS_EVERY = 10_000
