"""
FILE: Schemas/assumption_checker.py
------------------------------------
Pydantic schemas for the Normality / Assumption Evaluator.

FormalNormalityResult is what the external test-execution service (or the
local scipy checker) hands back. NormalityVerdict is the engine's view of it,
combined with the skewness/kurtosis shape flags from the descriptive stats.
"""

from enum import Enum

from pydantic import BaseModel


class NormalityStatus(str, Enum):
    NORMAL   = "normal"     # formal test passed
    VIOLATED = "violated"   # formal test rejected normality
    UNKNOWN  = "unknown"    # no formal verdict available


class FormalNormalityResult(BaseModel):
    variable: str
    test_name: str                      # "Shapiro-Wilk" | "Kolmogorov-Smirnov" | ...
    statistic: float
    p_value: float
    df: int | None = None
    is_normal: bool


class NormalityVerdict(BaseModel):
    variable: str

    # ── Formal test details (None when the service gave nothing) ──
    test_name: str | None = None
    statistic: float | None = None
    p_value: float | None = None
    is_normal: bool | None = None

    # ── Shape flags from the descriptive stats ──
    skewness_violation: bool = False    # |skewness| > 2
    kurtosis_violation: bool = False    # |kurtosis| > 2

    parametric_allowed: bool | None = None
    status: NormalityStatus = NormalityStatus.UNKNOWN
    plain_reason: str = ""
