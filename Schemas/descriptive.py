"""
FILE: Schemas/descriptive.py
-----------------------------
Pydantic output schemas for the Descriptive Statistics Calculator.
Records are replaced wholesale on recomputation, never mutated in place.
"""

from pydantic import BaseModel, Field


class DescriptiveStats(BaseModel):
    variable: str
    n: int
    mean: float = 0.0
    sd: float = 0.0
    variance: float = 0.0
    min: float | None = None        # None when n == 0
    max: float | None = None
    range: float | None = None
    skewness: float = 0.0           # adjusted Fisher–Pearson, 0 when n < 3
    kurtosis: float = 0.0           # excess, 0 when n < 4


class FrequencyCategory(BaseModel):
    value: str
    frequency: int
    percent: float                  # of all rows, missing included
    valid_percent: float            # of non-missing rows
    cumulative: float               # running valid percent


class FrequencyTable(BaseModel):
    variable: str
    categories: list[FrequencyCategory] = Field(default_factory=list)
    total: int = 0
    valid_total: int = 0
    missing: int = 0


class DescriptiveOutput(BaseModel):
    descriptives: list[DescriptiveStats] = Field(default_factory=list)
    frequencies: list[FrequencyTable] = Field(default_factory=list)

    def stats_for(self, variable: str) -> DescriptiveStats | None:
        for stats in self.descriptives:
            if stats.variable == variable:
                return stats
        return None
