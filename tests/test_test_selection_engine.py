from Schemas.dataset import MeasurementLevel, Variable
from Schemas.methodologist import SelectionMode
from core.test_selection_engine import nonparametric_alternative, validate_test_selection
from tests.helpers import make_dataset


def test_matching_selection_bypasses(two_group_dataset, score_variables):
    check = validate_test_selection(
        "independent-t-test", score_variables, dependent=["score"], grouping="group",
        dataset=two_group_dataset,
    )
    assert check.mode == SelectionMode.BYPASS
    assert check.errors == [] and check.warnings == []
    assert check.nonparametric_alternative == "Mann-Whitney U Test"


def test_small_sample_warns(score_variables):
    dataset = make_dataset(score=[1.5, 2.5, 3.5, 4.5], group=["a", "b", "a", "b"])
    check = validate_test_selection(
        "independent-t-test", score_variables, dependent=["score"], grouping="group", dataset=dataset,
    )
    assert check.mode == SelectionMode.WARNED
    assert "below the recommended minimum" in check.warnings[0]


def test_too_many_groups_overrides(three_group_dataset, score_variables):
    check = validate_test_selection(
        "independent-t-test", score_variables, dependent=["score"], grouping="group",
        dataset=three_group_dataset,
    )
    assert check.mode == SelectionMode.OVERRIDDEN
    assert any("at most 2 group" in e for e in check.errors)


def test_missing_grouping_overrides(score_variables):
    check = validate_test_selection("one-way-anova", score_variables, dependent=["score"])
    assert check.mode == SelectionMode.OVERRIDDEN


def test_wrong_measurement_level_overrides():
    variables = [
        Variable(name="a", measurement_level=MeasurementLevel.CONTINUOUS),
        Variable(name="city", measurement_level=MeasurementLevel.NOMINAL),
    ]
    check = validate_test_selection("pearson", variables, dependent=["a"], independent=["city"])
    assert check.mode == SelectionMode.OVERRIDDEN
    assert "city" in check.errors[0]


def test_count_level_satisfies_ordinal_requirement():
    variables = [
        Variable(name="a", measurement_level=MeasurementLevel.COUNT),
        Variable(name="b", measurement_level=MeasurementLevel.CONTINUOUS),
    ]
    check = validate_test_selection("spearman", variables, dependent=["a"], independent=["b"])
    assert check.mode == SelectionMode.BYPASS


def test_unknown_test_bypasses_with_warning(score_variables):
    check = validate_test_selection("tarot-reading", score_variables, dependent=["score"])
    assert check.mode == SelectionMode.BYPASS
    assert check.warnings


def test_nonparametric_alternatives():
    assert nonparametric_alternative("independent-t-test") == "mann-whitney"
    assert nonparametric_alternative("paired-t-test") == "wilcoxon"
    assert nonparametric_alternative("one-way-anova") == "kruskal-wallis"
    assert nonparametric_alternative("repeated-measures-anova") == "friedman"
    assert nonparametric_alternative("pearson") == "spearman"
    assert nonparametric_alternative("mann-whitney") is None
    assert nonparametric_alternative("no-such-test") is None
