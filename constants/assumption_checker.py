# ─────────────────────────────────────────────
# CONSTANTS
# ─────────────────────────────────────────────

SKEW_VIOLATION_THRESHOLD     = 2.0    # |skewness| above this → shape violation
KURTOSIS_VIOLATION_THRESHOLD = 2.0    # |excess kurtosis| above this → shape violation

NORMALITY_ALPHA     = 0.05
MIN_NORMALITY_N     = 3               # below this no formal test is attempted
SHAPIRO_MAX_N       = 50              # Shapiro-Wilk under this n, Kolmogorov-Smirnov from here on

# Product knob: let the shape flags veto parametric analysis
SHAPE_VETO_DEFAULT = False
