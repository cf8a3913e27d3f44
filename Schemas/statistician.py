"""
FILE: Schemas/statistician.py
------------------------------
Wire contract with the remote test-execution service.
The engine builds a TestExecutionRequest from a TestDecision; the service
computes the formal statistics (t, F, χ², p-values, CIs) and charts and
returns a TestExecutionResult. Nothing here is computed locally.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class EffectMagnitude(str, Enum):
    NEGLIGIBLE = "negligible"
    SMALL      = "small"
    MEDIUM     = "medium"
    LARGE      = "large"


class TestExecutionRequest(BaseModel):
    test_identifier: str                                # catalogue id, e.g. "independent-t-test"
    dependent_variables: list[str] = Field(default_factory=list)
    independent_variables: list[str] = Field(default_factory=list)
    grouping_variable: str | None = None
    rows: list[dict[str, Any]] = Field(default_factory=list)
    options: dict[str, Any] = Field(default_factory=dict)


class ResultTable(BaseModel):
    title: str
    headers: list[str] = Field(default_factory=list)
    rows: list[dict[str, Any]] = Field(default_factory=list)


class EffectSizeResult(BaseModel):
    type: str                                           # "Cohen's d", "η²", "r", ...
    value: float
    magnitude: EffectMagnitude
    interpretation: str = ""


class TestExecutionResult(BaseModel):
    tables: list[ResultTable] = Field(default_factory=list)
    charts: list[dict[str, Any]] = Field(default_factory=list)
    effect_size: EffectSizeResult | None = None
    summary: str = ""
