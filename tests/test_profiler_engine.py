import numpy as np
import pandas as pd

from Schemas.data_profiler_schema import ConfidenceLevel, IssueSeverity
from Schemas.dataset import Dataset, MeasurementLevel, Variable, VariableRole
from core.profiler_engine import (
    apply_roles,
    as_number,
    assess_classification_confidence,
    classify_measurement_level,
    is_missing,
    profile_variables,
    validate_headers,
    validate_variable_roles,
)
from tests.helpers import make_dataset


def _level(values):
    return classify_measurement_level(pd.Series(values, dtype=object))


# ─────────────────────────────────────────────
# VALUE HELPERS
# ─────────────────────────────────────────────

def test_missing_values():
    assert is_missing(None)
    assert is_missing("")
    assert is_missing(float("nan"))
    assert not is_missing(0)
    assert not is_missing(" ")
    assert not is_missing("x")


def test_number_parsing():
    assert as_number(3) == 3.0
    assert as_number("2.5") == 2.5
    assert as_number(" 7 ") == 7.0
    assert as_number("abc") is None
    assert as_number(True) is None
    assert as_number(float("inf")) is None


# ─────────────────────────────────────────────
# MEASUREMENT LEVEL
# ─────────────────────────────────────────────

def test_empty_column_is_nominal():
    assert _level([]) == MeasurementLevel.NOMINAL
    assert _level([None, "", np.nan]) == MeasurementLevel.NOMINAL


def test_numeric_levels():
    assert _level([0, 1, 0, 1, 1]) == MeasurementLevel.BINARY
    assert _level([0, 1, 2, 3, 4, 2]) == MeasurementLevel.COUNT
    assert _level(["1", "2", "3", "2"]) == MeasurementLevel.COUNT
    assert _level([-2, -1, 0, 1, 2]) == MeasurementLevel.ORDINAL
    assert _level([1.5, 2.25, 3.75, 4.0]) == MeasurementLevel.CONTINUOUS
    assert _level(list(range(-20, 20))) == MeasurementLevel.CONTINUOUS


def test_text_and_booleans_are_nominal():
    assert _level(["red", "green", "blue"]) == MeasurementLevel.NOMINAL
    assert _level([True, False, True]) == MeasurementLevel.NOMINAL


def test_numeric_ratio_threshold():
    """Exactly 90% numeric still counts as numeric; below that is nominal."""
    nine_numeric = [1.5, 2.5, 3.5, 4.5, 5.5, 6.5, 7.5, 8.5, 9.5, "n/a"]
    eight_numeric = [1.5, 2.5, 3.5, 4.5, 5.5, 6.5, 7.5, 8.5, "n/a"]
    assert _level(nine_numeric) == MeasurementLevel.CONTINUOUS
    assert _level(eight_numeric) == MeasurementLevel.NOMINAL


def test_missing_values_are_ignored_when_classifying():
    assert _level([None, "", np.nan, 0, 1]) == MeasurementLevel.BINARY


def test_only_first_hundred_values_are_sampled():
    values = [0, 1] * 50 + ["text"] * 50
    assert _level(values) == MeasurementLevel.BINARY


# ─────────────────────────────────────────────
# HEADERS
# ─────────────────────────────────────────────

def test_header_duplicate_and_special_characters():
    issues = validate_headers(["age", "age", "na me"])
    assert issues == ['Duplicate header: "age"', 'Special characters in: "na me"']


def test_header_empty_and_case_sensitivity():
    assert validate_headers(["", "   ", "ok"]) == ["Empty header detected", "Empty header detected"]
    assert validate_headers(["Age", "age"]) == []
    assert validate_headers(["score%"]) == ['Special characters in: "score%"']


def test_header_one_issue_per_header():
    """A duplicate that also has special characters reports the duplicate only."""
    issues = validate_headers(["a b", "a b"])
    assert issues == ['Special characters in: "a b"', 'Duplicate header: "a b"']


# ─────────────────────────────────────────────
# PROFILING
# ─────────────────────────────────────────────

def test_profile_variables_levels_and_order():
    dataset = make_dataset(
        id=list(range(1, 21)),
        gender=["m", "f"] * 10,
        likert=[1, 2, 3, 4, 5] * 4,
    )
    output = profile_variables(dataset)
    assert [v.name for v in output.variables] == ["id", "gender", "likert"]
    assert output.get("id").measurement_level == MeasurementLevel.CONTINUOUS
    assert output.get("gender").measurement_level == MeasurementLevel.NOMINAL
    assert output.get("likert").measurement_level == MeasurementLevel.COUNT
    assert output.header_issues == []


def test_profile_duplicate_headers_yield_one_variable():
    dataset = Dataset(column_names=["a", "a"], records=[{"a": 1}, {"a": 2}])
    output = profile_variables(dataset)
    assert [v.name for v in output.variables] == ["a"]
    assert output.header_issues == ['Duplicate header: "a"']
    assert any("more than once" in w for w in output.warnings)


def test_profile_does_not_mutate_dataset():
    dataset = make_dataset(x=[1.5, None, 3.5])
    before = dataset.model_dump()
    profile_variables(dataset)
    assert dataset.model_dump() == before


def test_apply_roles_returns_new_variables():
    variables = [Variable(name="score"), Variable(name="group")]
    updated = apply_roles(
        variables,
        roles={"score": "dependent"},
        labels={"group": "Study group"},
        measurement_overrides={"score": "continuous"},
    )
    assert updated[0].role == VariableRole.DEPENDENT
    assert updated[0].measurement_level == MeasurementLevel.CONTINUOUS
    assert updated[1].display_name == "Study group"
    assert variables[0].role is None


# ─────────────────────────────────────────────
# VARIABLE INTELLIGENCE
# ─────────────────────────────────────────────

def test_classification_confidence():
    dataset = make_dataset(
        income=[1000.5 + i * 37.25 for i in range(30)],
        city=["paris", "rome", "oslo"] * 10,
    )
    income = Variable(name="income", measurement_level=MeasurementLevel.CONTINUOUS)
    city = Variable(name="city", measurement_level=MeasurementLevel.NOMINAL)
    assert assess_classification_confidence(income, dataset).confidence == ConfidenceLevel.HIGH
    assert assess_classification_confidence(city, dataset).confidence == ConfidenceLevel.HIGH

    misread = Variable(name="city", measurement_level=MeasurementLevel.CONTINUOUS)
    assert assess_classification_confidence(misread, dataset).confidence == ConfidenceLevel.LOW
    assert assess_classification_confidence(income, None).confidence == ConfidenceLevel.LOW


def test_role_validation_messages():
    variables = [Variable(name="a"), Variable(name="b")]
    issues = validate_variable_roles(variables)
    assert [i.severity for i in issues] == [IssueSeverity.WARNING]

    both = [
        Variable(name="x", role=VariableRole.DEPENDENT, measurement_level=MeasurementLevel.CONTINUOUS),
        Variable(name="x", role=VariableRole.INDEPENDENT),
    ]
    assert any(i.severity == IssueSeverity.ERROR for i in validate_variable_roles(both))


def test_scale_group_validation():
    variables = [
        Variable(name="dv", role=VariableRole.DEPENDENT, measurement_level=MeasurementLevel.NOMINAL),
        Variable(name="q1", scale_group="satisfaction"),
        Variable(name="q2", scale_group="satisfaction"),
        Variable(name="q3", scale_group="loyalty"),
    ]
    issues = validate_variable_roles(variables)
    by_variable = {i.variable: i.severity for i in issues}
    assert by_variable["dv"] == IssueSeverity.INFO
    assert by_variable["satisfaction"] == IssueSeverity.INFO
    assert by_variable["loyalty"] == IssueSeverity.ERROR
