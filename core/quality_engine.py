"""
FILE: core/quality_engine.py
-----------------------------
Pure engine for the Data Quality Assessor.
Builds on the profiler's variables and header issues; never mutates data.

Missingness, duplicate rows and Tukey outliers roll up into one verdict:
  issues    → missing > 10%, duplicates > 10% of rows, or > 2 header issues
  attention → missing > 2%, any duplicate, any outlier, or any header issue
  good      → otherwise
"""

import json
import logging

import numpy as np
import pandas as pd

from Schemas.dataset import Dataset, MeasurementLevel
from Schemas.data_profiler_schema import VariableProfilerOutput
from Schemas.data_quality import QualitySummary, QualityVerdict, VariableQuality
from constants.data_quality import (
    ATTENTION_MISSING_PCT,
    IQR_MULTIPLIER,
    ISSUES_DUPLICATE_RATIO,
    ISSUES_HEADER_COUNT,
    ISSUES_MISSING_PCT,
    OUTLIER_MIN_N,
    Q1_POSITION,
    Q3_POSITION,
)
from core.profiler_engine import (
    category_label,
    header_issue_for,
    is_missing,
    non_missing,
    numeric_values,
    profile_variables,
)

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────
# HELPERS
# ─────────────────────────────────────────────

def count_outliers_iqr(values: pd.Series) -> int:
    """
    Tukey fences on nearest-rank quartiles. Samples of 10 or fewer values
    are never flagged.
    """
    numbers = pd.Series(values, dtype=float).dropna()
    n = len(numbers)
    if n <= OUTLIER_MIN_N:
        return 0

    ordered = np.sort(numbers.to_numpy())
    q1 = ordered[int(np.floor(n * Q1_POSITION))]
    q3 = ordered[int(np.floor(n * Q3_POSITION))]
    iqr = q3 - q1

    lower = q1 - IQR_MULTIPLIER * iqr
    upper = q3 + IQR_MULTIPLIER * iqr
    return int(((numbers < lower) | (numbers > upper)).sum())


def count_duplicate_rows(dataset: Dataset) -> int:
    serialized = pd.Series(
        [json.dumps(record, default=str) for record in dataset.records],
        dtype=object,
    )
    return int(len(serialized) - serialized.nunique())


def _overall_verdict(
    missing_pct: float,
    duplicates: int,
    row_count: int,
    outliers: int,
    header_issue_count: int,
) -> QualityVerdict:
    if (
        missing_pct > ISSUES_MISSING_PCT
        or duplicates > row_count * ISSUES_DUPLICATE_RATIO
        or header_issue_count > ISSUES_HEADER_COUNT
    ):
        return QualityVerdict.ISSUES
    if (
        missing_pct > ATTENTION_MISSING_PCT
        or duplicates > 0
        or outliers > 0
        or header_issue_count > 0
    ):
        return QualityVerdict.ATTENTION
    return QualityVerdict.GOOD


# ─────────────────────────────────────────────
# PUBLIC — MAIN ASSESSMENT FUNCTION
# ─────────────────────────────────────────────

def assess_data_quality(
    dataset: Dataset,
    profiler_output: VariableProfilerOutput | None = None,
) -> QualitySummary:
    """
    Pure function of the dataset. The profiler output is recomputed when
    not supplied so detected types never drift from the profiler's.
    """
    if profiler_output is None:
        profiler_output = profile_variables(dataset)

    rows = dataset.row_count
    per_variable: list[VariableQuality] = []
    total_missing = 0
    total_outliers = 0

    for var in profiler_output.variables:
        series = dataset.column(var.name)
        missing = int(series.map(is_missing).sum()) if rows else 0
        unique = int(non_missing(series).map(category_label).nunique())

        outliers = 0
        if var.measurement_level == MeasurementLevel.CONTINUOUS:
            outliers = count_outliers_iqr(numeric_values(series))

        total_missing += missing
        total_outliers += outliers

        per_variable.append(VariableQuality(
            name=var.name,
            missing_count=missing,
            missing_percent=missing / rows * 100 if rows else 0.0,
            detected_type=var.measurement_level,
            unique_count=unique,
            outlier_count=outliers,
            header_issue=header_issue_for(var.name, profiler_output.header_issues),
        ))

    total_cells = rows * len(profiler_output.variables)
    missing_pct = total_missing / total_cells * 100 if total_cells else 0.0
    duplicates = count_duplicate_rows(dataset)

    verdict = _overall_verdict(
        missing_pct=missing_pct,
        duplicates=duplicates,
        row_count=rows,
        outliers=total_outliers,
        header_issue_count=len(profiler_output.header_issues),
    )
    logger.debug(
        "Quality verdict=%s (missing=%.2f%%, duplicates=%d, outliers=%d)",
        verdict.value, missing_pct, duplicates, total_outliers,
    )

    return QualitySummary(
        total_missing=total_missing,
        total_missing_percent=missing_pct,
        duplicate_rows=duplicates,
        total_outliers=total_outliers,
        header_issues=list(profiler_output.header_issues),
        overall_verdict=verdict,
        variables=per_variable,
    )
