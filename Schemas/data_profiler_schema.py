"""
FILE: Schemas/data_profiler_schema.py
--------------------------------------
Pydantic output schemas for the Variable Profiler.
VariableProfilerOutput is the shared contract — the quality assessor,
descriptive calculator and decision engine all read its Variable list.
"""

from enum import Enum

from pydantic import BaseModel, Field

from Schemas.dataset import Variable


class ConfidenceLevel(str, Enum):
    HIGH   = "high"     # sampled values agree strongly with the assigned level
    MEDIUM = "medium"   # plausible, worth a glance
    LOW    = "low"      # likely misclassified


class IssueSeverity(str, Enum):
    ERROR   = "error"
    WARNING = "warning"
    INFO    = "info"


class VariableConfidence(BaseModel):
    name: str
    confidence: ConfidenceLevel
    reason: str


class RoleIssue(BaseModel):
    severity: IssueSeverity
    message: str
    variable: str | None = None


class VariableProfilerOutput(BaseModel):
    variables: list[Variable] = Field(default_factory=list)
    header_issues: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    def get(self, name: str) -> Variable | None:
        for var in self.variables:
            if var.name == name:
                return var
        return None
