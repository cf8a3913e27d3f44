# ─────────────────────────────────────────────
# CONSTANTS
# ─────────────────────────────────────────────

# Measurement-level inference looks at the first N non-missing values only
PROFILE_SAMPLE_SIZE = 100

# Share of sampled values that must parse as numbers for a numeric level
NUMERIC_RATIO_THRESHOLD = 0.90

# Distinct-value cut-offs for numeric columns (checked in this order)
BINARY_DISTINCT_VALUES = 2
COUNT_MAX_DISTINCT     = 10     # non-negative integers only
ORDINAL_MAX_DISTINCT   = 7      # integers only

# Header characters outside this class are flagged; spaces included
HEADER_DISALLOWED_PATTERN = r"[^A-Za-z0-9_]"

# Variable intelligence: classification confidence sample
CONFIDENCE_SAMPLE_ROWS = 200
MIN_SCALE_GROUP_ITEMS  = 2
