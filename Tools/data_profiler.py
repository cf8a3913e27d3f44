"""
FILE: Tools/data_profiler.py
-----------------------------
LangChain tools over the data side of the engine: dataset overview,
variable profiling, quality assessment, descriptives and sample rows.
Owns the session store the decision tools read from.
"""

import json

import pandas as pd
from langchain_core.tools import tool

from Schemas.dataset import Dataset, Hypothesis, Variable
from core.derived_views import DerivedViews
from core.profiler_engine import (
    apply_roles,
    assess_classification_confidence,
    validate_variable_roles,
)


# ─────────────────────────────────────────────
# SESSION STORE
# Holds the current dataset, hypotheses and user-assigned variables so
# all tools share the same reference. Derived views are memoized per
# dataset fingerprint.
# ─────────────────────────────────────────────

_engine_store: dict = {
    "dataset":    None,
    "variables":  None,     # user-edited Variables; None → profiler's
    "hypotheses": [],
}

_views = DerivedViews()


def init_engine_store(
    dataset: Dataset,
    hypotheses: list[Hypothesis] | None = None,
    roles: dict[str, str] | None = None,
    labels: dict[str, str] | None = None,
) -> None:
    """Called by the host application whenever a new dataset is uploaded."""
    _engine_store["dataset"]    = dataset
    _engine_store["hypotheses"] = list(hypotheses or [])
    _engine_store["variables"]  = None
    _views.clear()

    if roles or labels:
        base = _views.profile(dataset).variables
        _engine_store["variables"] = apply_roles(base, roles=roles, labels=labels)


def get_engine_store() -> dict:
    return _engine_store


def current_variables() -> list[Variable]:
    if _engine_store["variables"] is not None:
        return _engine_store["variables"]
    return _views.profile(_engine_store["dataset"]).variables


def _round_floats(payload):
    if isinstance(payload, float):
        return round(payload, 4)
    if isinstance(payload, dict):
        return {k: _round_floats(v) for k, v in payload.items()}
    if isinstance(payload, list):
        return [_round_floats(v) for v in payload]
    return payload


def _dump(payload) -> str:
    return json.dumps(_round_floats(payload), indent=2, default=str)


# ─────────────────────────────────────────────
# TOOLS
# ─────────────────────────────────────────────

@tool
def get_dataset_overview() -> str:
    """
    Return the shape, column names and first rows of the current dataset.
    Useful for verifying column references before profiling.
    """
    dataset = _engine_store["dataset"]
    if dataset is None:
        return "ERROR: No dataset loaded. Please call init_engine_store first."
    return _dump({
        "row_count":    dataset.row_count,
        "column_count": dataset.column_count,
        "columns":      dataset.column_names,
        "sample_rows":  dataset.records[:3],
    })


@tool
def run_variable_profiler() -> str:
    """
    Classify every column's measurement level and validate the headers.
    Also returns a confidence rating per variable and role-assignment issues.
    """
    dataset = _engine_store["dataset"]
    if dataset is None:
        return "ERROR: No dataset loaded. Please call init_engine_store first."
    try:
        profile = _views.profile(dataset)
        variables = current_variables()
        result = profile.model_dump(mode="json")
        result["variables"] = [v.model_dump(mode="json") for v in variables]
        result["confidence"] = [
            assess_classification_confidence(v, dataset).model_dump(mode="json")
            for v in variables
        ]
        result["role_issues"] = [
            issue.model_dump(mode="json") for issue in validate_variable_roles(variables)
        ]
        return _dump(result)
    except Exception as e:
        return f"ERROR: Profiling failed — {str(e)}"


@tool
def run_quality_assessment() -> str:
    """
    Assess missing values, duplicate rows, outliers and header problems.
    Returns a QualitySummary with an overall verdict: good, attention or issues.
    """
    dataset = _engine_store["dataset"]
    if dataset is None:
        return "ERROR: No dataset loaded. Please call init_engine_store first."
    try:
        return _dump(_views.quality(dataset).model_dump(mode="json"))
    except Exception as e:
        return f"ERROR: Quality assessment failed — {str(e)}"


@tool
def get_descriptive_statistics(variable: str | None = None) -> str:
    """
    Return descriptive statistics (continuous) or frequency tables (categorical).
    Args:
        variable: Optional column name. All variables are returned when omitted.
    """
    dataset = _engine_store["dataset"]
    if dataset is None:
        return "ERROR: No dataset loaded. Please call init_engine_store first."
    try:
        output = _views.describe(dataset, current_variables())
        if variable is None:
            return _dump(output.model_dump(mode="json"))

        stats = output.stats_for(variable)
        if stats is not None:
            return _dump(stats.model_dump(mode="json"))
        for table in output.frequencies:
            if table.variable == variable:
                return _dump(table.model_dump(mode="json"))
        return f"ERROR: Variable '{variable}' not found in dataset."
    except Exception as e:
        return f"ERROR: Descriptive statistics failed — {str(e)}"


@tool
def get_sample_rows(n: int = 3) -> str:
    """
    Return the first n rows of the dataset as a JSON string.
    Args:
        n: Number of rows to return (default 3, max 10).
    """
    dataset = _engine_store["dataset"]
    if dataset is None:
        return "ERROR: No dataset loaded. Please call init_engine_store first."
    n = min(n, 10)
    frame = pd.DataFrame(dataset.records[:n], columns=dataset.column_names)
    return frame.to_json(orient="records", indent=2)


# ─────────────────────────────────────────────
# EXPORTED TOOL LIST
# ─────────────────────────────────────────────

DATA_PROFILER_TOOLS = [
    get_dataset_overview,
    run_variable_profiler,
    run_quality_assessment,
    get_descriptive_statistics,
    get_sample_rows,
]
