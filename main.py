"""
FILE: main.py
--------------
LangGraph orchestrator for the statistical reasoning engine.
Wires the pure engines into a StateGraph; every node reads the state,
calls one engine and returns the updated state.

Pipeline flow:
  variable_profiler
      ↓ if no variables → END
  descriptives
      ↓
  data_quality
      ↓
  normality            ← NormalityVerdictSource (injected, optional)
      ↓
  test_decision
      ↓
  model_family
      ↓ if a TestExecutionService was injected → test_execution
      ↓ else → END
  test_execution       ← TestExecutionService (injected)
      ↓ [END]

External services:
  Calls to the normality source and the test executor are the only
  failure points outside the engine. Each failure is caught in its node,
  logged, recorded in state["errors"] and never aborts the pass.

State:
  EngineState TypedDict — inputs plus every engine output, all optional.
"""

import json
import logging
from typing import Any, TypedDict

from langgraph.graph import END, StateGraph

from Schemas.assumption_checker import FormalNormalityResult, NormalityVerdict
from Schemas.data_profiler_schema import RoleIssue, VariableProfilerOutput
from Schemas.data_quality import QualitySummary
from Schemas.dataset import Dataset, Hypothesis, Variable
from Schemas.descriptive import DescriptiveOutput
from Schemas.methodologist import InsufficientInput, ModelFamilyDetection, TestDecision
from Schemas.statistician import TestExecutionResult
from constants.assumption_checker import SHAPE_VETO_DEFAULT
from core.decision_engine import build_execution_request, decide_all, select_test_to_run
from core.descriptive_engine import describe_dataset
from core.execution_service import NormalityVerdictSource, TestExecutionService
from core.model_family_engine import detect_model_family_from_selection
from core.normality_engine import evaluate_normality
from core.profiler_engine import (
    apply_roles,
    numeric_values,
    profile_variables,
    validate_variable_roles,
)
from core.quality_engine import assess_data_quality

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────
# STATE SCHEMA
# TypedDict: all fields optional, populated as pipeline progresses
# ─────────────────────────────────────────────

class EngineState(TypedDict, total=False):
    # ── Inputs ──
    dataset:            Dataset
    hypotheses:         list[Hypothesis]
    role_assignments:   dict[str, str]          # variable → VariableRole value
    labels:             dict[str, str]          # variable → display label
    design_selection:   dict[str, list[str]]    # "dependent" / "factors" / "repeated"

    # ── Engine outputs ──
    profiler_output:    VariableProfilerOutput
    variables:          list[Variable]
    role_issues:        list[RoleIssue]
    descriptive_output: DescriptiveOutput
    quality_summary:    QualitySummary
    normality_verdicts: list[NormalityVerdict]
    decisions:          dict[str, TestDecision | InsufficientInput]
    model_family:       ModelFamilyDetection | None

    # ── External service results ──
    tests_to_run:       dict[str, str]          # hypothesis id → test actually requested
    execution_results:  dict[str, TestExecutionResult]

    # ── Non-fatal problems from external calls ──
    errors:             list[str]


# ─────────────────────────────────────────────
# NODE FUNCTIONS
# Each node runs one engine and updates state.
# ─────────────────────────────────────────────

def node_variable_profiler(state: EngineState) -> EngineState:
    """Classifies every column and applies the user's role assignments."""
    profile = profile_variables(state["dataset"])
    variables = apply_roles(
        profile.variables,
        roles=state.get("role_assignments"),
        labels=state.get("labels"),
    )
    logger.info("Profiled %d variable(s)", len(variables))
    return {
        **state,
        "profiler_output": profile,
        "variables":       variables,
        "role_issues":     validate_variable_roles(variables),
    }


def node_descriptives(state: EngineState) -> EngineState:
    output = describe_dataset(state["dataset"], state["variables"])
    logger.info(
        "Descriptives: %d continuous, %d categorical",
        len(output.descriptives), len(output.frequencies),
    )
    return {**state, "descriptive_output": output}


def node_data_quality(state: EngineState) -> EngineState:
    summary = assess_data_quality(state["dataset"], state["profiler_output"])
    logger.info("Data quality verdict: %s", summary.overall_verdict.value)
    return {**state, "quality_summary": summary}


def node_normality(
    state: EngineState,
    source: NormalityVerdictSource | None,
    shape_veto: bool = SHAPE_VETO_DEFAULT,
) -> EngineState:
    """
    Asks the verdict source about each continuous variable. A failing call
    leaves that variable unknown and is recorded in errors.
    """
    errors = list(state.get("errors", []))
    formal: dict[str, FormalNormalityResult] = {}

    if source is not None:
        for stats in state["descriptive_output"].descriptives:
            values = numeric_values(state["dataset"].column(stats.variable)).tolist()
            try:
                result = source.check_normality(stats.variable, values)
            except Exception as e:
                logger.warning("Normality check failed for '%s': %s", stats.variable, e)
                errors.append(f"Normality check failed for '{stats.variable}': {e}")
                continue
            if result is not None:
                formal[stats.variable] = result

    verdicts = evaluate_normality(
        state["descriptive_output"].descriptives, formal, shape_veto=shape_veto
    )
    logger.info("Normality verdicts for %d variable(s)", len(verdicts))
    return {**state, "normality_verdicts": verdicts, "errors": errors}


def node_test_decision(state: EngineState) -> EngineState:
    decisions = decide_all(
        state.get("hypotheses", []), state["variables"], state["dataset"]
    )
    for hypothesis_id, decision in decisions.items():
        if isinstance(decision, InsufficientInput):
            logger.info("%s: insufficient input — %s", hypothesis_id, decision.reason)
        else:
            logger.info("%s: %s", hypothesis_id, decision.recommended_test)
    return {**state, "decisions": decisions}


def node_model_family(state: EngineState) -> EngineState:
    selection = state.get("design_selection")
    if not selection:
        return {**state, "model_family": None}

    detection = detect_model_family_from_selection(
        dependent=selection.get("dependent", []),
        factors=selection.get("factors", []),
        repeated=selection.get("repeated", []),
    )
    logger.info("Model family: %s", detection.test_name if detection else "none")
    return {**state, "model_family": detection}


def node_test_execution(state: EngineState, executor: TestExecutionService) -> EngineState:
    """
    Sends one request per decided hypothesis. The fallback test replaces
    the recommendation when the DV's normality verdict disallows it.
    """
    errors = list(state.get("errors", []))
    results: dict[str, TestExecutionResult] = {}
    tests_to_run: dict[str, str] = {}
    hypotheses = {h.id: h for h in state.get("hypotheses", [])}
    verdicts = state.get("normality_verdicts", [])

    for hypothesis_id, decision in state.get("decisions", {}).items():
        if isinstance(decision, InsufficientInput) or decision.is_manual:
            continue
        hypothesis = hypotheses[hypothesis_id]
        test_name, reason = select_test_to_run(
            decision, verdicts, hypothesis.dependent_variables[0]
        )
        logger.info("%s: running %s (%s)", hypothesis_id, test_name, reason)

        request = build_execution_request(decision, hypothesis, state["dataset"], test_name=test_name)
        if request is None:
            errors.append(f"{hypothesis_id}: '{test_name}' has no catalogue entry.")
            continue

        tests_to_run[hypothesis_id] = test_name
        try:
            results[hypothesis_id] = executor.run_test(request)
        except Exception as e:
            logger.warning("Test execution failed for %s: %s", hypothesis_id, e)
            errors.append(f"Test execution failed for {hypothesis_id}: {e}")

    return {
        **state,
        "tests_to_run":      tests_to_run,
        "execution_results": results,
        "errors":            errors,
    }


# ─────────────────────────────────────────────
# CONDITIONAL EDGE FUNCTIONS
# ─────────────────────────────────────────────

def route_after_profiler(state: EngineState) -> str:
    if not state.get("variables"):
        return END
    return "descriptives"


# ─────────────────────────────────────────────
# GRAPH CONSTRUCTION
# ─────────────────────────────────────────────

def build_graph(
    normality_source: NormalityVerdictSource | None = None,
    test_executor: TestExecutionService | None = None,
    shape_veto: bool = SHAPE_VETO_DEFAULT,
):
    """Builds and compiles the engine pipeline with the given services."""

    def normality(state: EngineState) -> EngineState:
        return node_normality(state, normality_source, shape_veto=shape_veto)

    def test_execution(state: EngineState) -> EngineState:
        return node_test_execution(state, test_executor)

    def route_after_model_family(state: EngineState) -> str:
        return "test_execution" if test_executor is not None else END

    builder = StateGraph(EngineState)

    # ── Register nodes ──
    builder.add_node("variable_profiler", node_variable_profiler)
    builder.add_node("descriptives",      node_descriptives)
    builder.add_node("data_quality",      node_data_quality)
    builder.add_node("normality",         normality)
    builder.add_node("test_decision",     node_test_decision)
    builder.add_node("model_family",      node_model_family)
    builder.add_node("test_execution",    test_execution)

    # ── Entry point ──
    builder.set_entry_point("variable_profiler")

    # ── Edges ──
    builder.add_conditional_edges("variable_profiler", route_after_profiler)
    builder.add_edge("descriptives",  "data_quality")
    builder.add_edge("data_quality",  "normality")
    builder.add_edge("normality",     "test_decision")
    builder.add_edge("test_decision", "model_family")
    builder.add_conditional_edges("model_family", route_after_model_family)

    # ── Terminal edge ──
    builder.add_edge("test_execution", END)

    return builder.compile()


# ─────────────────────────────────────────────
# PUBLIC ENTRY POINT
# ─────────────────────────────────────────────

def run_pipeline(
    dataset: Dataset,
    hypotheses: list[Hypothesis] | None = None,
    role_assignments: dict[str, str] | None = None,
    labels: dict[str, str] | None = None,
    design_selection: dict[str, list[str]] | None = None,
    normality_source: NormalityVerdictSource | None = None,
    test_executor: TestExecutionService | None = None,
    shape_veto: bool = SHAPE_VETO_DEFAULT,
) -> dict[str, Any]:
    """
    Main entry point: one full pass of the engine over a dataset.

    Usage:
        state = run_pipeline(dataset, [Hypothesis(id="H1", type="difference",
                             dependent_variables=["score"],
                             independent_variables=["group"])])
        state["decisions"]["H1"].recommended_test

    Re-run after the remote service responds; the pass is a pure function
    of its inputs plus whatever the injected services return.
    """
    graph = build_graph(
        normality_source=normality_source,
        test_executor=test_executor,
        shape_veto=shape_veto,
    )
    initial_state: EngineState = {
        "dataset":          dataset,
        "hypotheses":       list(hypotheses or []),
        "role_assignments": dict(role_assignments or {}),
        "labels":           dict(labels or {}),
        "design_selection": dict(design_selection or {}),
        "errors":           [],
    }
    return graph.invoke(initial_state)


# ─────────────────────────────────────────────
# CLI RUNNER
# Usage: python main.py data.csv [difference|association|prediction DV [IV ...]]
# ─────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    import pandas as pd

    from core.execution_service import ScipyNormalityChecker

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if len(sys.argv) < 2:
        print("Usage: python main.py <csv_path> [<hypothesis_type> <dv> [<iv> ...]]")
        sys.exit(1)

    dataset = Dataset.from_dataframe(pd.read_csv(sys.argv[1]))
    hypotheses = []
    if len(sys.argv) >= 4:
        hypotheses.append(Hypothesis(
            id="H1",
            type=sys.argv[2],
            dependent_variables=[sys.argv[3]],
            independent_variables=sys.argv[4:],
        ))

    state = run_pipeline(dataset, hypotheses, normality_source=ScipyNormalityChecker())

    print("\n" + "=" * 60)
    print("  STATISTICAL REASONING ENGINE")
    print("=" * 60)
    print(json.dumps({
        "variables": [v.model_dump(mode="json") for v in state.get("variables", [])],
        "quality":   state["quality_summary"].model_dump(mode="json") if "quality_summary" in state else None,
        "normality": [v.model_dump(mode="json") for v in state.get("normality_verdicts", [])],
        "decisions": {k: d.model_dump(mode="json") for k, d in state.get("decisions", {}).items()},
        "errors":    state.get("errors", []),
    }, indent=2, default=str))
