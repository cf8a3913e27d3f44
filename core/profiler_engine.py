"""
FILE: core/profiler_engine.py
------------------------------
Pure engine for the Variable Profiler.
No LangChain dependencies — just pandas and numpy.

Classifies each column's measurement level from a sample of its values,
flags header/naming problems, and (variable intelligence) rates how much
the assigned levels can be trusted and whether the user's role
assignments are coherent.
"""

import logging
import re
from typing import Any

import numpy as np
import pandas as pd

from Schemas.dataset import Dataset, MeasurementLevel, Variable, VariableRole
from Schemas.data_profiler_schema import (
    ConfidenceLevel,
    IssueSeverity,
    RoleIssue,
    VariableConfidence,
    VariableProfilerOutput,
)
from constants.data_profiler_constants import (
    BINARY_DISTINCT_VALUES,
    CONFIDENCE_SAMPLE_ROWS,
    COUNT_MAX_DISTINCT,
    HEADER_DISALLOWED_PATTERN,
    MIN_SCALE_GROUP_ITEMS,
    NUMERIC_RATIO_THRESHOLD,
    ORDINAL_MAX_DISTINCT,
    PROFILE_SAMPLE_SIZE,
)

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────
# VALUE HELPERS (shared by every engine)
# ─────────────────────────────────────────────

def is_missing(value: Any) -> bool:
    """None, NaN/NaT and the empty string count as missing."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def as_number(value: Any) -> float | None:
    """
    Parses a cell as a finite number, or returns None.
    Booleans are not numbers here — they are categories.
    """
    if isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if np.isfinite(number) else None


def category_label(value: Any) -> str:
    """String form used for distinct-value counting; 2.0 and 2 collapse to "2"."""
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value)


def non_missing(series: pd.Series) -> pd.Series:
    if series.empty:
        return series
    return series[~series.map(is_missing).astype(bool)]


def numeric_values(series: pd.Series) -> pd.Series:
    """Non-missing cells that parse as numbers, as a float series."""
    parsed = non_missing(series).map(as_number)
    return parsed.dropna().astype(float)


# ─────────────────────────────────────────────
# MEASUREMENT LEVEL
# ─────────────────────────────────────────────

def classify_measurement_level(series: pd.Series) -> MeasurementLevel:
    """
    Infers a level from the first PROFILE_SAMPLE_SIZE non-missing values.
    Numeric columns (≥ 90% parseable) split on distinct-value count;
    everything else, including an empty column, is nominal.
    """
    sample = non_missing(series).head(PROFILE_SAMPLE_SIZE)
    if sample.empty:
        return MeasurementLevel.NOMINAL

    numbers = sample.map(as_number).dropna().astype(float)
    if len(numbers) / len(sample) < NUMERIC_RATIO_THRESHOLD:
        return MeasurementLevel.NOMINAL

    distinct = int(numbers.nunique())
    all_integers = bool((numbers % 1 == 0).all())

    if distinct == BINARY_DISTINCT_VALUES:
        return MeasurementLevel.BINARY
    if distinct <= COUNT_MAX_DISTINCT and all_integers and bool((numbers >= 0).all()):
        return MeasurementLevel.COUNT
    if distinct <= ORDINAL_MAX_DISTINCT and all_integers:
        return MeasurementLevel.ORDINAL
    return MeasurementLevel.CONTINUOUS


# ─────────────────────────────────────────────
# HEADER VALIDATION
# ─────────────────────────────────────────────

def validate_headers(headers: list[str]) -> list[str]:
    """
    One issue per header at most, first failing rule wins:
    empty → duplicate (exact, case-sensitive) → special characters.
    """
    issues: list[str] = []
    seen: set[str] = set()

    for header in headers:
        if header is None or not str(header).strip():
            issues.append("Empty header detected")
        elif header in seen:
            issues.append(f'Duplicate header: "{header}"')
        elif re.search(HEADER_DISALLOWED_PATTERN, header):
            issues.append(f'Special characters in: "{header}"')
        seen.add(header)

    return issues


def header_issue_for(name: str, header_issues: list[str]) -> str | None:
    quoted = f'"{name}"'
    for issue in header_issues:
        if issue.endswith(quoted):
            return issue
    return None


# ─────────────────────────────────────────────
# PUBLIC — MAIN PROFILING FUNCTION
# ─────────────────────────────────────────────

def profile_variables(dataset: Dataset) -> VariableProfilerOutput:
    """
    Produces one Variable per distinct column name, in column order.
    Pure — no mutation of the dataset, nothing blocks downstream logic.
    """
    header_issues = validate_headers(dataset.column_names)
    variables: list[Variable] = []
    warnings: list[str] = []
    seen: set[str] = set()

    for name in dataset.column_names:
        # ── Duplicate header → keep the first column only ──
        if name in seen:
            warnings.append(
                f"Column '{name}' appears more than once; only the first occurrence is profiled."
            )
            continue
        seen.add(name)

        series = dataset.column(name)
        level = classify_measurement_level(series)

        if dataset.row_count and non_missing(series).empty:
            warnings.append(
                f"Column '{name}' is entirely empty — treated as nominal."
            )

        variables.append(Variable(name=name, measurement_level=level))

    logger.debug(
        "Profiled %d variable(s), %d header issue(s)", len(variables), len(header_issues)
    )
    return VariableProfilerOutput(
        variables=variables,
        header_issues=header_issues,
        warnings=warnings,
    )


def apply_roles(
    variables: list[Variable],
    roles: dict[str, VariableRole | str | None] | None = None,
    labels: dict[str, str] | None = None,
    scale_groups: dict[str, str] | None = None,
    measurement_overrides: dict[str, MeasurementLevel | str] | None = None,
) -> list[Variable]:
    """Returns new Variable records carrying the user's assignments."""
    roles = roles or {}
    labels = labels or {}
    scale_groups = scale_groups or {}
    measurement_overrides = measurement_overrides or {}

    updated: list[Variable] = []
    for var in variables:
        changes: dict[str, Any] = {}
        if var.name in roles:
            role = roles[var.name]
            changes["role"] = VariableRole(role) if role is not None else None
        if var.name in labels:
            changes["label"] = labels[var.name]
        if var.name in scale_groups:
            changes["scale_group"] = scale_groups[var.name]
        if var.name in measurement_overrides:
            changes["measurement_level"] = MeasurementLevel(measurement_overrides[var.name])
        updated.append(var.model_copy(update=changes) if changes else var)
    return updated


# ─────────────────────────────────────────────
# VARIABLE INTELLIGENCE
# ─────────────────────────────────────────────

def assess_classification_confidence(
    variable: Variable,
    dataset: Dataset | None,
) -> VariableConfidence:
    """How well the sampled values support the variable's current level."""
    if dataset is None:
        return VariableConfidence(
            name=variable.name, confidence=ConfidenceLevel.LOW, reason="No data available"
        )

    values = non_missing(dataset.column(variable.name).head(CONFIDENCE_SAMPLE_ROWS))
    total = len(values)
    if total == 0:
        return VariableConfidence(
            name=variable.name, confidence=ConfidenceLevel.LOW, reason="No values found"
        )

    numeric_ratio = int(values.map(as_number).notna().sum()) / total
    unique_count = int(values.map(category_label).nunique())
    pct = f"{numeric_ratio * 100:.0f}%"
    level = variable.measurement_level

    if level == MeasurementLevel.CONTINUOUS:
        if numeric_ratio > 0.95 and unique_count > 10:
            return VariableConfidence(
                name=variable.name, confidence=ConfidenceLevel.HIGH,
                reason=f"{pct} numeric, {unique_count} unique values",
            )
        if numeric_ratio > 0.8:
            return VariableConfidence(
                name=variable.name, confidence=ConfidenceLevel.MEDIUM, reason=f"{pct} numeric"
            )
        return VariableConfidence(
            name=variable.name, confidence=ConfidenceLevel.LOW,
            reason=f"Only {pct} numeric values for a continuous variable",
        )

    if level in (MeasurementLevel.NOMINAL, MeasurementLevel.BINARY):
        if numeric_ratio < 0.5 or unique_count <= 10:
            return VariableConfidence(
                name=variable.name, confidence=ConfidenceLevel.HIGH,
                reason=f"{unique_count} categories detected",
            )
        if unique_count <= 20:
            return VariableConfidence(
                name=variable.name, confidence=ConfidenceLevel.MEDIUM,
                reason=f"{unique_count} unique values — may be continuous",
            )
        return VariableConfidence(
            name=variable.name, confidence=ConfidenceLevel.LOW,
            reason=f"{unique_count} unique values — likely misclassified",
        )

    # ordinal / count
    if numeric_ratio > 0.8 and unique_count <= 10:
        return VariableConfidence(
            name=variable.name, confidence=ConfidenceLevel.HIGH,
            reason=f"{unique_count} ordered levels",
        )
    if unique_count <= 15:
        return VariableConfidence(
            name=variable.name, confidence=ConfidenceLevel.MEDIUM, reason=f"{unique_count} levels"
        )
    return VariableConfidence(
        name=variable.name, confidence=ConfidenceLevel.LOW, reason="Too many levels for ordinal"
    )


def validate_variable_roles(variables: list[Variable]) -> list[RoleIssue]:
    """Coherence checks on the user's DV/IV and scale-group assignments."""
    issues: list[RoleIssue] = []

    dv_vars = [v for v in variables if v.role == VariableRole.DEPENDENT]
    iv_vars = [v for v in variables if v.role == VariableRole.INDEPENDENT]

    if not dv_vars and variables:
        issues.append(RoleIssue(
            severity=IssueSeverity.WARNING,
            message="No Dependent Variable (DV) assigned. Assign at least one DV for inferential tests.",
        ))

    dv_names = {v.name for v in dv_vars}
    for var in iv_vars:
        if var.name in dv_names:
            issues.append(RoleIssue(
                severity=IssueSeverity.ERROR,
                message=f'"{var.name}" is assigned as both DV and IV',
                variable=var.name,
            ))

    for var in dv_vars:
        if var.measurement_level == MeasurementLevel.NOMINAL:
            issues.append(RoleIssue(
                severity=IssueSeverity.INFO,
                message=(
                    f'DV "{var.name}" is nominal — parametric tests require a continuous DV. '
                    f"Non-parametric tests or logistic regression recommended."
                ),
                variable=var.name,
            ))

    scale_groups: dict[str, list[Variable]] = {}
    for var in variables:
        if var.scale_group:
            scale_groups.setdefault(var.scale_group, []).append(var)

    for group_name, items in scale_groups.items():
        if len(items) < MIN_SCALE_GROUP_ITEMS:
            issues.append(RoleIssue(
                severity=IssueSeverity.ERROR,
                message=(
                    f'Scale group "{group_name}" has only {len(items)} item. '
                    f"Minimum {MIN_SCALE_GROUP_ITEMS} items required."
                ),
                variable=group_name,
            ))
        else:
            issues.append(RoleIssue(
                severity=IssueSeverity.INFO,
                message=(
                    f'Scale group "{group_name}" ({len(items)} items) — '
                    f"Cronbach's Alpha reliability check recommended."
                ),
                variable=group_name,
            ))

    return issues
