import json

import pytest

from Schemas.dataset import Hypothesis
from Tools.data_profiler import (
    get_dataset_overview,
    get_descriptive_statistics,
    get_engine_store,
    init_engine_store,
    run_quality_assessment,
    run_variable_profiler,
)
from Tools.statistical_decision import (
    check_normality,
    check_test_selection,
    choose_test_after_normality,
    detect_design,
    recommend_test,
)


@pytest.fixture
def loaded_store(two_group_dataset):
    init_engine_store(
        two_group_dataset,
        hypotheses=[Hypothesis(id="H1", type="difference",
                               dependent_variables=["score"], independent_variables=["group"])],
        roles={"score": "dependent", "group": "independent"},
    )
    yield get_engine_store()
    get_engine_store().update({"dataset": None, "variables": None, "hypotheses": []})


def test_tools_report_missing_dataset():
    get_engine_store().update({"dataset": None, "variables": None, "hypotheses": []})
    assert get_dataset_overview.invoke({}).startswith("ERROR")
    assert recommend_test.invoke({"hypothesis_id": "H1"}).startswith("ERROR")


def test_overview_and_profile(loaded_store):
    overview = json.loads(get_dataset_overview.invoke({}))
    assert overview["row_count"] == 40
    assert overview["columns"] == ["score", "group"]

    profile = json.loads(run_variable_profiler.invoke({}))
    levels = {v["name"]: v["measurement_level"] for v in profile["variables"]}
    assert levels == {"score": "continuous", "group": "nominal"}
    assert {v["name"]: v["role"] for v in profile["variables"]}["score"] == "dependent"
    assert len(profile["confidence"]) == 2


def test_quality_and_descriptives(loaded_store):
    quality = json.loads(run_quality_assessment.invoke({}))
    assert quality["total_missing"] == 0

    stats = json.loads(get_descriptive_statistics.invoke({"variable": "score"}))
    assert stats["n"] == 40
    table = json.loads(get_descriptive_statistics.invoke({"variable": "group"}))
    assert [c["frequency"] for c in table["categories"]] == [20, 20]
    assert get_descriptive_statistics.invoke({"variable": "nope"}).startswith("ERROR")


def test_decision_tools(loaded_store):
    decision = json.loads(recommend_test.invoke({"hypothesis_id": "H1"}))
    assert decision["recommended_test"] == "Independent Samples T-Test"
    assert recommend_test.invoke({"hypothesis_id": "H9"}).startswith("ERROR")

    chosen = json.loads(choose_test_after_normality.invoke({"hypothesis_id": "H1"}))
    assert chosen["test_to_run"] in ("Independent Samples T-Test", "Mann-Whitney U Test")

    verdict = json.loads(check_normality.invoke({"variable": "score"}))
    assert verdict["test_name"] == "Shapiro-Wilk"


def test_design_and_selection_tools(loaded_store):
    assert json.loads(detect_design.invoke({"n_dependent": 2, "n_factors": 1}))["family"] == "manova"
    assert json.loads(detect_design.invoke({"n_dependent": 0, "n_factors": 0}))["family"] is None

    check = json.loads(check_test_selection.invoke({
        "test_id": "independent-t-test", "dependent": ["score"], "grouping": "group",
    }))
    assert check["mode"] == "bypass"
