"""
FILE: core/descriptive_engine.py
---------------------------------
Pure engine for the Descriptive Statistics Calculator.
No LangChain dependencies — pandas and numpy only.

Continuous variables get moment statistics; every other level gets a
frequency table. Degenerate inputs produce zeros, never NaN.
"""

import logging

import numpy as np
import pandas as pd

from Schemas.dataset import Dataset, MeasurementLevel, Variable
from Schemas.descriptive import (
    DescriptiveOutput,
    DescriptiveStats,
    FrequencyCategory,
    FrequencyTable,
)
from core.profiler_engine import category_label, non_missing, numeric_values

logger = logging.getLogger(__name__)


def _finite_or_zero(value) -> float:
    value = float(value)
    return value if np.isfinite(value) else 0.0


# ─────────────────────────────────────────────
# CONTINUOUS
# ─────────────────────────────────────────────

def compute_descriptive_stats(name: str, values: pd.Series) -> DescriptiveStats:
    """
    Sample statistics over the numeric, non-missing values of one column.
    Variance uses n-1; skewness is the adjusted Fisher–Pearson coefficient
    and kurtosis is excess kurtosis (pandas' bias-corrected estimators).
    """
    numbers = numeric_values(pd.Series(values, dtype=object))
    n = len(numbers)

    if n == 0:
        return DescriptiveStats(variable=name, n=0)

    mean     = _finite_or_zero(numbers.mean())
    variance = _finite_or_zero(numbers.var(ddof=1)) if n >= 2 else 0.0
    sd       = float(np.sqrt(variance))

    # ── Shape: undefined for tiny or constant samples ──
    skewness = _finite_or_zero(numbers.skew()) if n >= 3 and sd > 0 else 0.0
    kurtosis = _finite_or_zero(numbers.kurt()) if n >= 4 and sd > 0 else 0.0

    low, high = float(numbers.min()), float(numbers.max())

    return DescriptiveStats(
        variable=name,
        n=n,
        mean=mean,
        sd=sd,
        variance=variance,
        min=low,
        max=high,
        range=high - low,
        skewness=skewness,
        kurtosis=kurtosis,
    )


# ─────────────────────────────────────────────
# CATEGORICAL
# ─────────────────────────────────────────────

def compute_frequency_table(name: str, values: pd.Series, total_rows: int | None = None) -> FrequencyTable:
    """
    Counts per category, highest first; ties keep first-seen order.
    percent is over all rows, valid_percent over non-missing rows only.
    """
    values = pd.Series(values, dtype=object)
    total = len(values) if total_rows is None else total_rows
    labels = non_missing(values).map(category_label)
    valid_total = len(labels)

    counts = (
        labels.value_counts()
        .reindex(labels.unique())
        .sort_values(ascending=False, kind="stable")
    )

    categories: list[FrequencyCategory] = []
    cumulative = 0.0
    for value, frequency in counts.items():
        valid_pct = frequency / valid_total * 100 if valid_total else 0.0
        cumulative += valid_pct
        categories.append(FrequencyCategory(
            value=str(value),
            frequency=int(frequency),
            percent=frequency / total * 100 if total else 0.0,
            valid_percent=valid_pct,
            cumulative=cumulative,
        ))

    return FrequencyTable(
        variable=name,
        categories=categories,
        total=total,
        valid_total=valid_total,
        missing=total - valid_total,
    )


# ─────────────────────────────────────────────
# PUBLIC — WHOLE DATASET
# ─────────────────────────────────────────────

def describe_dataset(dataset: Dataset, variables: list[Variable]) -> DescriptiveOutput:
    descriptives: list[DescriptiveStats] = []
    frequencies: list[FrequencyTable] = []

    for var in variables:
        series = dataset.column(var.name)
        if var.measurement_level == MeasurementLevel.CONTINUOUS:
            descriptives.append(compute_descriptive_stats(var.name, series))
        else:
            frequencies.append(compute_frequency_table(var.name, series, dataset.row_count))

    logger.debug(
        "Described %d continuous and %d categorical variable(s)",
        len(descriptives), len(frequencies),
    )
    return DescriptiveOutput(descriptives=descriptives, frequencies=frequencies)
