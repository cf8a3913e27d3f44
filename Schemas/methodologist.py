"""
FILE: Schemas/methodologist.py
-------------------------------
Pydantic output schemas for test selection.

TestDecision is the decision record consumed by the test-execution service
and the report generator. InsufficientInput is the explicit "no decision"
variant returned when the hypothesis has no usable dependent variable.
"""

from enum import Enum

from pydantic import BaseModel, Field

from constants.decision_engine import MANUAL_SELECTION


# ─────────────────────────────────────────────
# ENUMS
# ─────────────────────────────────────────────

class SelectionMode(str, Enum):
    BYPASS     = "bypass"       # user-picked test fits the variables, passed through
    WARNED     = "warned"       # fits, but a soft requirement (sample size) is not met
    OVERRIDDEN = "overridden"   # fundamental mismatch, use the decision engine instead


class ModelFamily(str, Enum):
    ONE_WAY_ANOVA           = "one_way_anova"
    TWO_WAY_ANOVA           = "two_way_anova"
    REPEATED_MEASURES_ANOVA = "repeated_measures_anova"
    MANOVA                  = "manova"


# ─────────────────────────────────────────────
# DECISION ENGINE OUTPUT
# ─────────────────────────────────────────────

class TestDecision(BaseModel):
    hypothesis_id: str
    dv_type: str                                    # detected measurement level of the DV

    # ── Selected tests ──
    recommended_test: str
    alternative_test: str | None = None             # assumption-violation fallback
    required_assumptions: list[str] = Field(default_factory=list)
    effect_size_type: str = ""
    post_hoc_required: bool = False
    direction: str = "two-tailed"

    # ── Decision factors (audit trail) ──
    sample_size: int = 0
    group_count: int | None = None
    sample_per_group: int | None = None

    auto_null_hypothesis: str = ""
    reasoning_trace: list[str] = Field(default_factory=list)

    @property
    def is_manual(self) -> bool:
        return self.recommended_test == MANUAL_SELECTION


class InsufficientInput(BaseModel):
    hypothesis_id: str
    reason: str
    reasoning_trace: list[str] = Field(default_factory=list)


# ─────────────────────────────────────────────
# MODEL-FAMILY DETECTOR OUTPUT
# ─────────────────────────────────────────────

class ModelFamilyDetection(BaseModel):
    family: ModelFamily
    test_name: str                                  # "MANOVA", "Two-Way ANOVA", ...
    reason: str


# ─────────────────────────────────────────────
# USER-PICKED TEST VALIDATION
# ─────────────────────────────────────────────

class TestSelectionCheck(BaseModel):
    test_id: str
    test_name: str | None = None
    mode: SelectionMode
    errors: list[str] = Field(default_factory=list)     # hard mismatches
    warnings: list[str] = Field(default_factory=list)   # soft issues
    nonparametric_alternative: str | None = None
