"""
FILE: Schemas/data_quality.py
------------------------------
Pydantic output schema for the Data Quality Assessor.
QualitySummary is never authoritative — always a pure function of the Dataset.
"""

from enum import Enum

from pydantic import BaseModel, Field

from Schemas.dataset import MeasurementLevel


class QualityVerdict(str, Enum):
    GOOD      = "good"
    ATTENTION = "attention"
    ISSUES    = "issues"


class VariableQuality(BaseModel):
    name: str
    missing_count: int
    missing_percent: float
    detected_type: MeasurementLevel
    unique_count: int
    outlier_count: int = 0
    header_issue: str | None = None


class QualitySummary(BaseModel):
    total_missing: int = 0
    total_missing_percent: float = 0.0
    duplicate_rows: int = 0
    total_outliers: int = 0
    header_issues: list[str] = Field(default_factory=list)
    overall_verdict: QualityVerdict = QualityVerdict.GOOD
    variables: list[VariableQuality] = Field(default_factory=list)
