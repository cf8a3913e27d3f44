# ─────────────────────────────────────────────
# TEST NAMES
# ─────────────────────────────────────────────

INDEPENDENT_T_TEST   = "Independent Samples T-Test"
MANN_WHITNEY         = "Mann-Whitney U Test"
ONE_WAY_ANOVA        = "One-Way ANOVA"
KRUSKAL_WALLIS       = "Kruskal-Wallis H Test"
CHI_SQUARE           = "Chi-Square Test of Independence"
FISHER_EXACT         = "Fisher's Exact Test"
PAIRED_T_TEST        = "Paired Samples T-Test"
WILCOXON             = "Wilcoxon Signed-Rank Test"
PEARSON              = "Pearson Correlation"
SPEARMAN             = "Spearman Correlation"
KENDALL_TAU          = "Kendall's Tau"
SIMPLE_REGRESSION    = "Simple Linear Regression"
MULTIPLE_REGRESSION  = "Multiple Linear Regression"
LOGISTIC_REGRESSION  = "Binary Logistic Regression"
TWO_WAY_ANOVA        = "Two-Way ANOVA"
REPEATED_MEASURES    = "Repeated-Measures ANOVA"
MANOVA               = "MANOVA"

MANUAL_SELECTION     = "Manual selection required"


# ─────────────────────────────────────────────
# EFFECT SIZES
# ─────────────────────────────────────────────

COHENS_D        = "Cohen's d"
ETA_SQUARED     = "Eta-squared (η²)"
CRAMERS_V       = "Cramér's V"
PEARSON_R       = "r (correlation coefficient)"
SPEARMAN_RHO    = "ρ (rho)"
R_SQUARED       = "R²"
R_SQUARED_ADJ   = "R², Adjusted R²"
LOGISTIC_EFFECT = "Nagelkerke R², Odds Ratio"


# ─────────────────────────────────────────────
# ASSUMPTIONS
# ─────────────────────────────────────────────

NORMALITY                = "Normality (Shapiro-Wilk/K-S)"
HOMOGENEITY              = "Homogeneity of variance (Levene's)"
NORMALITY_OF_DIFFERENCES = "Normality of differences"
LINEARITY                = "Linearity"
RESIDUAL_NORMALITY       = "Normality of residuals"
HOMOSCEDASTICITY         = "Homoscedasticity"
NO_MULTICOLLINEARITY     = "No multicollinearity"


# ─────────────────────────────────────────────
# MISC
# ─────────────────────────────────────────────

# Stringified placeholder some sources emit for absent cells; never a group
UNDEFINED_GROUP_TOKEN = "undefined"

# Group-count bounds for the difference rules
TWO_GROUPS       = 2
MIN_ANOVA_GROUPS = 3

# Design-detector thresholds
MIN_REPEATED_MEASURES = 3

# Default significance level sent with execution requests
SIGNIFICANCE_ALPHA = 0.05
