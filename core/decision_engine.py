"""
FILE: core/decision_engine.py
------------------------------
Pure deterministic logic for the Test Decision Engine.
No LangChain or LLM dependencies.

Maps (hypothesis type, DV level, IV level, group count, DV count) to a
recommended test, its assumption-violation fallback, the effect size to
report and the assumptions to check. Rules are ordered guards — first
match wins; nothing matching means "Manual selection required".

Routing levels:
  binary → nominal, count → ordinal. The trace records both the detected
  and the routed level so the report can explain the fold.
"""

import logging
from collections.abc import Mapping

from pydantic import BaseModel, Field

from Schemas.assumption_checker import NormalityVerdict
from Schemas.dataset import Dataset, Hypothesis, HypothesisType, MeasurementLevel, Variable
from Schemas.methodologist import InsufficientInput, TestDecision
from Schemas.statistician import TestExecutionRequest
from Utils.test_requirements_registry import TEST_REQUIREMENTS, test_id_for_name
from constants.decision_engine import (
    CHI_SQUARE,
    COHENS_D,
    CRAMERS_V,
    ETA_SQUARED,
    FISHER_EXACT,
    HOMOGENEITY,
    HOMOSCEDASTICITY,
    INDEPENDENT_T_TEST,
    KENDALL_TAU,
    KRUSKAL_WALLIS,
    LINEARITY,
    LOGISTIC_EFFECT,
    LOGISTIC_REGRESSION,
    MANN_WHITNEY,
    MANUAL_SELECTION,
    MIN_ANOVA_GROUPS,
    MULTIPLE_REGRESSION,
    NO_MULTICOLLINEARITY,
    NORMALITY,
    NORMALITY_OF_DIFFERENCES,
    ONE_WAY_ANOVA,
    PAIRED_T_TEST,
    PEARSON,
    PEARSON_R,
    R_SQUARED,
    R_SQUARED_ADJ,
    RESIDUAL_NORMALITY,
    SIGNIFICANCE_ALPHA,
    SIMPLE_REGRESSION,
    SPEARMAN,
    SPEARMAN_RHO,
    TWO_GROUPS,
    UNDEFINED_GROUP_TOKEN,
    WILCOXON,
)
from core.profiler_engine import category_label, non_missing

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────
# ROUTING LEVELS
# ─────────────────────────────────────────────

_ROUTING_LEVEL: dict[MeasurementLevel, MeasurementLevel] = {
    MeasurementLevel.CONTINUOUS: MeasurementLevel.CONTINUOUS,
    MeasurementLevel.ORDINAL:    MeasurementLevel.ORDINAL,
    MeasurementLevel.NOMINAL:    MeasurementLevel.NOMINAL,
    MeasurementLevel.BINARY:     MeasurementLevel.NOMINAL,
    MeasurementLevel.COUNT:      MeasurementLevel.ORDINAL,
}


def routing_level(level: MeasurementLevel) -> MeasurementLevel:
    return _ROUTING_LEVEL[level]


_CONTINUOUS = MeasurementLevel.CONTINUOUS
_ORDINAL    = MeasurementLevel.ORDINAL
_NOMINAL    = MeasurementLevel.NOMINAL


# ─────────────────────────────────────────────
# DECISION FACTS / RULE OUTCOME
# ─────────────────────────────────────────────

class _DecisionFacts(BaseModel):
    hypothesis_type: HypothesisType
    dv_level: MeasurementLevel                  # routed
    iv_level: MeasurementLevel | None = None    # routed
    counterpart_level: MeasurementLevel | None = None
    n_dependent: int
    n_independent: int
    group_count: int | None = None


class _RuleOutcome(BaseModel):
    recommended: str
    alternative: str | None = None
    effect_size: str = ""
    assumptions: list[str] = Field(default_factory=list)
    post_hoc: bool = False
    reason: str


# ─────────────────────────────────────────────
# HELPERS
# ─────────────────────────────────────────────

def count_groups(dataset: Dataset | None, column: str) -> int:
    """Distinct non-missing values of a column, ignoring the "undefined" token."""
    if dataset is None:
        return 0
    labels = non_missing(dataset.column(column)).map(category_label)
    labels = labels[labels != UNDEFINED_GROUP_TOKEN]
    return int(labels.nunique())


def _find_variable(name: str | None, variables: list[Variable]) -> Variable | None:
    if not name:
        return None
    for var in variables:
        if var.name == name:
            return var
    return None


def _label(name: str, variables: list[Variable]) -> str:
    var = _find_variable(name, variables)
    return var.display_name if var else name


def _level_clause(role: str, var: Variable) -> str:
    detected = var.measurement_level
    routed = routing_level(detected)
    clause = f'{role} "{var.name}" is {detected.value}'
    if routed != detected:
        clause += f" (routed as {routed.value})"
    return clause


# ─────────────────────────────────────────────
# RULE TABLE — ORDERED GUARDS
# ─────────────────────────────────────────────

def _match_difference(facts: _DecisionFacts) -> _RuleOutcome | None:
    categorical_iv = facts.iv_level in (_NOMINAL, _ORDINAL)

    if facts.dv_level == _CONTINUOUS and categorical_iv and facts.group_count == TWO_GROUPS:
        return _RuleOutcome(
            recommended=INDEPENDENT_T_TEST,
            alternative=MANN_WHITNEY,
            effect_size=COHENS_D,
            assumptions=[NORMALITY, HOMOGENEITY],
            reason="Continuous DV compared across 2 independent groups",
        )

    if (
        facts.dv_level == _CONTINUOUS and categorical_iv
        and facts.group_count is not None and facts.group_count >= MIN_ANOVA_GROUPS
    ):
        return _RuleOutcome(
            recommended=ONE_WAY_ANOVA,
            alternative=KRUSKAL_WALLIS,
            effect_size=ETA_SQUARED,
            assumptions=[NORMALITY, HOMOGENEITY],
            post_hoc=True,
            reason=f"Continuous DV compared across {facts.group_count} groups — post-hoc comparisons required",
        )

    if facts.dv_level == _NOMINAL and facts.iv_level == _NOMINAL:
        return _RuleOutcome(
            recommended=CHI_SQUARE,
            alternative=FISHER_EXACT,
            effect_size=CRAMERS_V,
            reason=(
                "Nominal DV against nominal IV — "
                f"{FISHER_EXACT} applies when expected cell counts are below 5"
            ),
        )

    if facts.dv_level in (_ORDINAL, _CONTINUOUS) and facts.n_dependent == 2:
        return _RuleOutcome(
            recommended=PAIRED_T_TEST,
            alternative=WILCOXON,
            effect_size=COHENS_D,
            assumptions=[NORMALITY_OF_DIFFERENCES],
            reason="Two related measurements of the same cases",
        )

    return None


def _match_association(facts: _DecisionFacts) -> _RuleOutcome | None:
    other = facts.counterpart_level

    if facts.dv_level == _CONTINUOUS and other == _CONTINUOUS:
        return _RuleOutcome(
            recommended=PEARSON,
            alternative=SPEARMAN,
            effect_size=PEARSON_R,
            assumptions=[NORMALITY, LINEARITY],
            reason="Both variables continuous — linear association",
        )

    if other is not None and (facts.dv_level == _ORDINAL or other == _ORDINAL):
        return _RuleOutcome(
            recommended=SPEARMAN,
            alternative=KENDALL_TAU,
            effect_size=SPEARMAN_RHO,
            reason="At least one ordinal variable — rank-based association",
        )

    return None


def _match_prediction(facts: _DecisionFacts) -> _RuleOutcome | None:
    regression_assumptions = [LINEARITY, RESIDUAL_NORMALITY, HOMOSCEDASTICITY]

    if facts.dv_level == _CONTINUOUS and facts.n_independent == 1:
        return _RuleOutcome(
            recommended=SIMPLE_REGRESSION,
            effect_size=R_SQUARED,
            assumptions=regression_assumptions,
            reason="Continuous outcome predicted from one predictor",
        )

    if facts.dv_level == _CONTINUOUS and facts.n_independent >= 2:
        return _RuleOutcome(
            recommended=MULTIPLE_REGRESSION,
            effect_size=R_SQUARED_ADJ,
            assumptions=regression_assumptions + [NO_MULTICOLLINEARITY],
            reason=f"Continuous outcome predicted from {facts.n_independent} predictors",
        )

    if facts.dv_level == _NOMINAL:
        return _RuleOutcome(
            recommended=LOGISTIC_REGRESSION,
            effect_size=LOGISTIC_EFFECT,
            reason="Categorical outcome — logistic model",
        )

    return None


_RULES_BY_TYPE = {
    HypothesisType.DIFFERENCE:  _match_difference,
    HypothesisType.ASSOCIATION: _match_association,
    HypothesisType.PREDICTION:  _match_prediction,
}


# ─────────────────────────────────────────────
# NULL HYPOTHESIS TEMPLATES
# ─────────────────────────────────────────────

def build_null_hypothesis(hypothesis: Hypothesis, variables: list[Variable]) -> str:
    dvs = [_label(name, variables) for name in hypothesis.dependent_variables]
    ivs = [_label(name, variables) for name in hypothesis.independent_variables]
    if not dvs:
        return ""
    dv = dvs[0]

    if hypothesis.type == HypothesisType.DIFFERENCE:
        if ivs:
            return f"There is no statistically significant difference in {dv} across {ivs[0]} groups."
        if len(dvs) >= 2:
            return f"There is no statistically significant difference between {dv} and {dvs[1]}."
        return f"There is no statistically significant difference in {dv}."

    if hypothesis.type == HypothesisType.ASSOCIATION:
        other = ivs[0] if ivs else (dvs[1] if len(dvs) >= 2 else None)
        if other:
            return f"There is no statistically significant relationship between {dv} and {other}."
        return f"There is no statistically significant relationship involving {dv}."

    # prediction
    if len(ivs) == 1:
        return f"{ivs[0]} does not significantly predict {dv}."
    if ivs:
        joined = ", ".join(ivs[:-1]) + f" and {ivs[-1]}"
        return f"{joined} do not significantly predict {dv}."
    return f"The predictors do not significantly predict {dv}."


# ─────────────────────────────────────────────
# PUBLIC — DECIDE
# ─────────────────────────────────────────────

def decide_test(
    hypothesis: Hypothesis,
    variables: list[Variable],
    dataset: Dataset | None = None,
) -> TestDecision | InsufficientInput:
    """
    Deterministic decision for one hypothesis. Never raises for missing
    inputs — no usable DV gives InsufficientInput, no matching rule gives
    a manual-selection decision with the reason in the trace.
    """
    trace: list[str] = []

    # ── 1. Dependent variable ──
    if not hypothesis.dependent_variables:
        return InsufficientInput(
            hypothesis_id=hypothesis.id,
            reason="No dependent variable assigned",
            reasoning_trace=["No dependent variable assigned to this hypothesis"],
        )
    dv_name = hypothesis.dependent_variables[0]
    dv = _find_variable(dv_name, variables)
    if dv is None:
        return InsufficientInput(
            hypothesis_id=hypothesis.id,
            reason=f'Dependent variable "{dv_name}" is not a known variable',
            reasoning_trace=[f'DV "{dv_name}" not found among the dataset variables'],
        )
    trace.append(_level_clause("DV", dv))

    # ── 2. Independent variable ──
    known_ivs: list[Variable] = []
    for iv_name in hypothesis.independent_variables:
        found = _find_variable(iv_name, variables)
        if found is None:
            trace.append(f'IV "{iv_name}" not found among the dataset variables — treated as absent')
        else:
            known_ivs.append(found)
    iv = known_ivs[0] if known_ivs else None
    resolved = hypothesis.model_copy(
        update={"independent_variables": [v.name for v in known_ivs]}
    )

    # ── 3. Sample and groups ──
    sample_size = dataset.row_count if dataset is not None else 0
    group_count: int | None = None
    sample_per_group: int | None = None

    if iv is not None:
        group_count = count_groups(dataset, iv.name)
        sample_per_group = sample_size // max(group_count, 1)
        trace.append(f"{_level_clause('IV', iv)} with {group_count} group(s)")
    trace.append(f"Total N = {sample_size}")

    # Association may pair two DVs when no IV is given
    counterpart = iv
    if counterpart is None and len(hypothesis.dependent_variables) >= 2:
        counterpart = _find_variable(hypothesis.dependent_variables[1], variables)

    facts = _DecisionFacts(
        hypothesis_type=hypothesis.type,
        dv_level=routing_level(dv.measurement_level),
        iv_level=routing_level(iv.measurement_level) if iv else None,
        counterpart_level=routing_level(counterpart.measurement_level) if counterpart else None,
        n_dependent=len(hypothesis.dependent_variables),
        n_independent=len(known_ivs),
        group_count=group_count,
    )

    # ── 4. Guards ──
    outcome = _RULES_BY_TYPE[hypothesis.type](facts)

    if outcome is None:
        trace.append("Could not auto-determine test — please configure manually")
        logger.debug("Hypothesis %s: no rule matched", hypothesis.id)
        return TestDecision(
            hypothesis_id=hypothesis.id,
            dv_type=dv.measurement_level.value,
            recommended_test=MANUAL_SELECTION,
            sample_size=sample_size,
            group_count=group_count,
            sample_per_group=sample_per_group,
            auto_null_hypothesis=build_null_hypothesis(resolved, variables),
            reasoning_trace=trace,
        )

    trace.append(f"{outcome.reason} → {outcome.recommended}")
    if outcome.alternative:
        trace.append(f"Fallback if assumptions fail → {outcome.alternative}")
    logger.debug("Hypothesis %s → %s", hypothesis.id, outcome.recommended)

    return TestDecision(
        hypothesis_id=hypothesis.id,
        dv_type=dv.measurement_level.value,
        recommended_test=outcome.recommended,
        alternative_test=outcome.alternative,
        required_assumptions=list(outcome.assumptions),
        effect_size_type=outcome.effect_size,
        post_hoc_required=outcome.post_hoc,
        sample_size=sample_size,
        group_count=group_count,
        sample_per_group=sample_per_group,
        auto_null_hypothesis=build_null_hypothesis(resolved, variables),
        reasoning_trace=trace,
    )


def decide_all(
    hypotheses: list[Hypothesis],
    variables: list[Variable],
    dataset: Dataset | None = None,
) -> dict[str, TestDecision | InsufficientInput]:
    return {h.id: decide_test(h, variables, dataset) for h in hypotheses}


# ─────────────────────────────────────────────
# FALLBACK SELECTION
# ─────────────────────────────────────────────

def select_test_to_run(
    decision: TestDecision,
    verdicts: Mapping[str, NormalityVerdict] | list[NormalityVerdict],
    dependent_variable: str,
) -> tuple[str, str]:
    """
    Returns (test_name, reason). The fallback replaces the recommended test
    only when the DV's verdict explicitly disallows parametric analysis;
    an unknown verdict keeps the recommendation.
    """
    if decision.is_manual:
        return MANUAL_SELECTION, "No test could be determined automatically."

    if not isinstance(verdicts, Mapping):
        verdicts = {v.variable: v for v in verdicts}
    verdict = verdicts.get(dependent_variable)

    if verdict is None or verdict.parametric_allowed is None:
        return decision.recommended_test, "Normality unknown — keeping the recommended test."
    if verdict.parametric_allowed:
        return decision.recommended_test, "Normality assumption met."
    if decision.alternative_test:
        return (
            decision.alternative_test,
            f"Normality violated for '{dependent_variable}' — switching to {decision.alternative_test}.",
        )
    return (
        decision.recommended_test,
        f"Normality violated for '{dependent_variable}' but no alternative exists — interpret cautiously.",
    )


# ─────────────────────────────────────────────
# EXECUTION REQUEST
# ─────────────────────────────────────────────

def build_execution_request(
    decision: TestDecision,
    hypothesis: Hypothesis,
    dataset: Dataset,
    test_name: str | None = None,
    alpha: float = SIGNIFICANCE_ALPHA,
) -> TestExecutionRequest | None:
    """
    Wire request for the remote service. None when the test is manual or
    not in the catalogue. Tests that compare groups get the first IV as
    their grouping variable.
    """
    test_name = test_name or decision.recommended_test
    test_id = test_id_for_name(test_name)
    if test_id is None:
        logger.debug("No catalogue id for test '%s'", test_name)
        return None

    dependent = list(hypothesis.dependent_variables)
    independent = [name for name in hypothesis.independent_variables if name in dataset.column_names]
    grouping: str | None = None
    if TEST_REQUIREMENTS[test_id].get("grouping") and independent:
        grouping, independent = independent[0], independent[1:]

    return TestExecutionRequest(
        test_identifier=test_id,
        dependent_variables=dependent,
        independent_variables=independent,
        grouping_variable=grouping,
        rows=[dict(r) for r in dataset.records],
        options={
            "hypothesis_id": hypothesis.id,
            "alpha": alpha,
            "direction": decision.direction,
            "post_hoc": decision.post_hoc_required,
        },
    )
