import pytest

from Schemas.assumption_checker import FormalNormalityResult, NormalityStatus
from Schemas.descriptive import DescriptiveStats
from core.execution_service import CannedNormalitySource, ScipyNormalityChecker
from core.normality_engine import build_normality_verdict, evaluate_normality


def _stats(variable="x", skewness=0.0, kurtosis=0.0):
    return DescriptiveStats(variable=variable, n=30, mean=1.0, sd=1.0, variance=1.0,
                            skewness=skewness, kurtosis=kurtosis)


def _formal(variable="x", is_normal=True, p_value=0.4):
    return FormalNormalityResult(
        variable=variable, test_name="Shapiro-Wilk", statistic=0.97, p_value=p_value, is_normal=is_normal
    )


# ─────────────────────────────────────────────
# VERDICTS
# ─────────────────────────────────────────────

def test_missing_formal_result_is_unknown():
    verdict = build_normality_verdict(_stats(skewness=3.0), None)
    assert verdict.status == NormalityStatus.UNKNOWN
    assert verdict.is_normal is None
    assert verdict.parametric_allowed is None
    assert verdict.skewness_violation is True


def test_formal_result_passes_through():
    normal = build_normality_verdict(_stats(), _formal(is_normal=True))
    assert normal.status == NormalityStatus.NORMAL
    assert normal.parametric_allowed is True

    violated = build_normality_verdict(_stats(), _formal(is_normal=False, p_value=0.001))
    assert violated.status == NormalityStatus.VIOLATED
    assert violated.parametric_allowed is False


def test_shape_flags_are_context_unless_veto():
    skewed = _stats(skewness=-2.5, kurtosis=4.0)
    verdict = build_normality_verdict(skewed, _formal(is_normal=True))
    assert verdict.skewness_violation and verdict.kurtosis_violation
    assert verdict.parametric_allowed is True

    vetoed = build_normality_verdict(skewed, _formal(is_normal=True), shape_veto=True)
    assert vetoed.parametric_allowed is False
    assert vetoed.is_normal is True


def test_threshold_is_strict():
    verdict = build_normality_verdict(_stats(skewness=2.0, kurtosis=-2.0), None)
    assert not verdict.skewness_violation
    assert not verdict.kurtosis_violation


def test_evaluate_accepts_list_or_mapping():
    descriptives = [_stats("a"), _stats("b")]
    from_list = evaluate_normality(descriptives, [_formal("a", is_normal=False)])
    from_map = evaluate_normality(descriptives, {"a": _formal("a", is_normal=False)})
    assert from_list == from_map
    assert [v.status for v in from_list] == [NormalityStatus.VIOLATED, NormalityStatus.UNKNOWN]
    assert [v.status for v in evaluate_normality(descriptives)] == [NormalityStatus.UNKNOWN] * 2


# ─────────────────────────────────────────────
# LOCAL VERDICT SOURCES
# ─────────────────────────────────────────────

def test_scipy_checker_skips_degenerate_samples():
    checker = ScipyNormalityChecker()
    assert checker.check_normality("x", [1.0, 2.0]) is None
    assert checker.check_normality("x", [4.0] * 20) is None


@pytest.mark.parametrize("n, expected_test", [(30, "Shapiro-Wilk"), (200, "Kolmogorov-Smirnov")])
def test_scipy_checker_picks_test_by_size(rng, n, expected_test):
    result = ScipyNormalityChecker().check_normality("x", rng.normal(size=n).tolist())
    assert result.test_name == expected_test
    assert result.df == n
    assert 0.0 <= result.p_value <= 1.0


def test_scipy_checker_rejects_skewed_data(rng):
    result = ScipyNormalityChecker().check_normality("x", rng.exponential(size=500).tolist())
    assert result.is_normal is False


def test_canned_source_serves_known_variables():
    source = CannedNormalitySource({"x": _formal("x")})
    assert source.check_normality("x", []).is_normal is True
    assert source.check_normality("y", [1.0, 2.0, 3.0]) is None
