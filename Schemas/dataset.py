"""
FILE: Schemas/dataset.py
-------------------------
Pydantic input contracts shared by every engine: the parsed Dataset,
the Variable records derived from it, and the user's Hypotheses.

Dataset is frozen — a new upload replaces it wholesale.
Variable.measurement_level is inferred by the profiler, not authoritative;
Variable.role is assigned by the user and drives decision routing.
"""

import hashlib
import json
from enum import Enum
from typing import Any

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, model_validator


# ─────────────────────────────────────────────
# ENUMS
# ─────────────────────────────────────────────

class MeasurementLevel(str, Enum):
    CONTINUOUS = "continuous"
    ORDINAL    = "ordinal"
    NOMINAL    = "nominal"
    BINARY     = "binary"
    COUNT      = "count"


class VariableRole(str, Enum):
    NONE        = "none"
    ID          = "id"
    DEMOGRAPHIC = "demographic"
    DEPENDENT   = "dependent"
    INDEPENDENT = "independent"
    SCALE_ITEM  = "scale_item"


class HypothesisType(str, Enum):
    DIFFERENCE  = "difference"   # group comparison: t-test, ANOVA, chi-square
    ASSOCIATION = "association"  # correlation
    PREDICTION  = "prediction"   # regression


class HypothesisStatus(str, Enum):
    UNTESTED  = "untested"
    SUPPORTED = "supported"
    REJECTED  = "rejected"


# ─────────────────────────────────────────────
# VARIABLE
# ─────────────────────────────────────────────

class Variable(BaseModel):
    name: str
    measurement_level: MeasurementLevel = MeasurementLevel.NOMINAL
    role: VariableRole | None = None
    scale_group: str | None = None      # e.g. Q1_1, Q1_2 → "Satisfaction Scale"
    label: str | None = None            # display label used in generated text

    @property
    def display_name(self) -> str:
        return self.label or self.name


# ─────────────────────────────────────────────
# DATASET
# ─────────────────────────────────────────────

class Dataset(BaseModel):
    model_config = ConfigDict(frozen=True)

    column_names: list[str]
    records: list[dict[str, Any]] = Field(default_factory=list)
    row_count: int | None = None
    column_count: int | None = None

    @model_validator(mode="before")
    @classmethod
    def _fill_counts(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            if data.get("row_count") is None:
                data["row_count"] = len(data.get("records") or [])
            if data.get("column_count") is None:
                data["column_count"] = len(data.get("column_names") or [])
        return data

    @model_validator(mode="after")
    def _check_counts(self) -> "Dataset":
        if self.row_count != len(self.records):
            raise ValueError(
                f"Declared row_count={self.row_count} but {len(self.records)} record(s) supplied."
            )
        if self.column_count != len(self.column_names):
            raise ValueError(
                f"Declared column_count={self.column_count} but "
                f"{len(self.column_names)} column name(s) supplied."
            )
        return self

    # ── Constructors ──

    @classmethod
    def from_records(
        cls,
        records: list[dict[str, Any]],
        column_names: list[str] | None = None,
    ) -> "Dataset":
        """
        Build a Dataset from row mappings. Column order defaults to the
        order keys are first seen across the records.
        """
        if column_names is None:
            column_names = []
            for row in records:
                for key in row:
                    if key not in column_names:
                        column_names.append(key)
        return cls(column_names=list(column_names), records=[dict(r) for r in records])

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> "Dataset":
        """NaN cells become None so missingness is uniform across sources."""
        clean = df.astype(object).where(df.notna(), None)
        return cls(
            column_names=[str(c) for c in df.columns],
            records=clean.to_dict(orient="records"),
        )

    # ── Accessors ──

    def column(self, name: str) -> pd.Series:
        """Raw values of one column in row order. Absent keys become None."""
        return pd.Series(
            [row.get(name) for row in self.records],
            name=name,
            dtype=object,
        )

    def fingerprint(self) -> str:
        """Stable content hash — used to key memoized derived views."""
        payload = json.dumps(
            {"columns": self.column_names, "records": self.records},
            default=str,
        )
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()


# ─────────────────────────────────────────────
# HYPOTHESIS
# ─────────────────────────────────────────────

class Hypothesis(BaseModel):
    id: str                                     # "H1", "H2", ...
    type: HypothesisType
    statement: str = ""
    dependent_variables: list[str] = Field(default_factory=list)
    independent_variables: list[str] = Field(default_factory=list)
    status: HypothesisStatus = HypothesisStatus.UNTESTED
