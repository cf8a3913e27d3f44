"""
FILE: Tools/statistical_decision.py
------------------------------------
LangChain tools over the decision side of the engine: test recommendation,
normality checks, model-family detection and validation of a hand-picked
test. They share the session store from Tools/data_profiler.py.
"""

import json

from langchain_core.tools import tool

from Schemas.methodologist import InsufficientInput
from core.decision_engine import decide_test, select_test_to_run
from core.descriptive_engine import compute_descriptive_stats
from core.execution_service import ScipyNormalityChecker
from core.model_family_engine import detect_model_family
from core.normality_engine import build_normality_verdict
from core.profiler_engine import numeric_values
from core.test_selection_engine import validate_test_selection
from Tools.data_profiler import current_variables, get_engine_store


def _find_hypothesis(hypothesis_id: str):
    for hypothesis in get_engine_store()["hypotheses"]:
        if hypothesis.id == hypothesis_id:
            return hypothesis
    return None


# ─────────────────────────────────────────────
# TOOLS
# ─────────────────────────────────────────────

@tool
def recommend_test(hypothesis_id: str) -> str:
    """
    Run the decision engine for one hypothesis (e.g. "H1").
    Returns the recommended test, its fallback, effect size, assumptions,
    the auto-generated null hypothesis and the reasoning trace.
    """
    store = get_engine_store()
    if store["dataset"] is None:
        return "ERROR: No dataset loaded. Please call init_engine_store first."
    hypothesis = _find_hypothesis(hypothesis_id)
    if hypothesis is None:
        return f"ERROR: Hypothesis '{hypothesis_id}' not found."
    try:
        decision = decide_test(hypothesis, current_variables(), store["dataset"])
        return json.dumps(decision.model_dump(mode="json"), indent=2)
    except Exception as e:
        return f"ERROR: Test decision failed — {str(e)}"


@tool
def check_normality(variable: str) -> str:
    """
    Run a formal normality test (Shapiro-Wilk for n < 50, else Kolmogorov-Smirnov)
    on one column and combine it with the skewness/kurtosis shape flags.
    """
    dataset = get_engine_store()["dataset"]
    if dataset is None:
        return "ERROR: No dataset loaded. Please call init_engine_store first."
    if variable not in dataset.column_names:
        return f"ERROR: Variable '{variable}' not found in dataset."
    try:
        series = dataset.column(variable)
        stats = compute_descriptive_stats(variable, series)
        formal = ScipyNormalityChecker().check_normality(variable, numeric_values(series).tolist())
        verdict = build_normality_verdict(stats, formal)
        return json.dumps(verdict.model_dump(mode="json"), indent=2)
    except Exception as e:
        return f"ERROR: Normality check failed — {str(e)}"


@tool
def choose_test_after_normality(hypothesis_id: str) -> str:
    """
    Decide the test for a hypothesis, check the DV's normality and return
    the test that should actually run (recommended or its fallback).
    """
    store = get_engine_store()
    if store["dataset"] is None:
        return "ERROR: No dataset loaded. Please call init_engine_store first."
    hypothesis = _find_hypothesis(hypothesis_id)
    if hypothesis is None:
        return f"ERROR: Hypothesis '{hypothesis_id}' not found."
    if not hypothesis.dependent_variables:
        return f"ERROR: Hypothesis '{hypothesis_id}' has no dependent variable."
    try:
        dataset = store["dataset"]
        decision = decide_test(hypothesis, current_variables(), dataset)
        if isinstance(decision, InsufficientInput):
            return f"ERROR: {decision.reason}"

        dv = hypothesis.dependent_variables[0]
        series = dataset.column(dv)
        formal = ScipyNormalityChecker().check_normality(dv, numeric_values(series).tolist())
        verdict = build_normality_verdict(compute_descriptive_stats(dv, series), formal)
        test_name, reason = select_test_to_run(decision, [verdict], dv)
        return json.dumps({
            "hypothesis_id": hypothesis_id,
            "recommended_test": decision.recommended_test,
            "test_to_run": test_name,
            "reason": reason,
        }, indent=2)
    except Exception as e:
        return f"ERROR: Test selection failed — {str(e)}"


@tool
def detect_design(n_dependent: int, n_factors: int, n_repeated: int = 0) -> str:
    """
    Detect the ANOVA-family model from the number of dependent variables,
    between-subject factors and repeated measures.
    """
    detection = detect_model_family(n_dependent, n_factors, n_repeated)
    if detection is None:
        return json.dumps({"family": None, "reason": "No ANOVA-family model matches this selection."})
    return json.dumps(detection.model_dump(mode="json"), indent=2)


@tool
def check_test_selection(
    test_id: str,
    dependent: list[str],
    independent: list[str] | None = None,
    grouping: str | None = None,
) -> str:
    """
    Validate a test the user picked by catalogue id (e.g. "independent-t-test").
    Returns mode bypass / warned / overridden with errors, warnings and the
    non-parametric alternative.
    """
    dataset = get_engine_store()["dataset"]
    if dataset is None:
        return "ERROR: No dataset loaded. Please call init_engine_store first."
    try:
        check = validate_test_selection(
            test_id=test_id,
            variables=current_variables(),
            dependent=dependent,
            independent=independent or [],
            grouping=grouping,
            dataset=dataset,
        )
        return json.dumps(check.model_dump(mode="json"), indent=2)
    except Exception as e:
        return f"ERROR: Test selection check failed — {str(e)}"


# ─────────────────────────────────────────────
# EXPORTED TOOL LIST
# ─────────────────────────────────────────────

STATISTICAL_DECISION_TOOLS = [
    recommend_test,
    check_normality,
    choose_test_after_normality,
    detect_design,
    check_test_selection,
]
