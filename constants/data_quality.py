# ─────────────────────────────────────────────
# CONSTANTS
# ─────────────────────────────────────────────

# Tukey fences
IQR_MULTIPLIER = 1.5

# Outliers are only counted for continuous columns with strictly more values than this
OUTLIER_MIN_N = 10

# Nearest-rank quartile positions into the ascending sample
Q1_POSITION = 0.25
Q3_POSITION = 0.75

# Verdict thresholds; "issues" is checked before "attention"
ISSUES_MISSING_PCT        = 10.0
ISSUES_DUPLICATE_RATIO    = 0.10    # duplicates as a share of rows
ISSUES_HEADER_COUNT       = 2       # more than this many header issues
ATTENTION_MISSING_PCT     = 2.0
