from Schemas.assumption_checker import FormalNormalityResult, NormalityStatus
from Schemas.dataset import Dataset, Hypothesis
from Schemas.methodologist import InsufficientInput, ModelFamily
from Schemas.statistician import TestExecutionResult as ExecutionResult
from core.execution_service import CannedNormalitySource
from main import run_pipeline


def _h1():
    return Hypothesis(id="H1", type="difference",
                      dependent_variables=["score"], independent_variables=["group"])


class FailingSource:
    def check_normality(self, variable, values):
        raise ConnectionError("service unavailable")


class RecordingExecutor:
    def __init__(self, fail=False):
        self.requests = []
        self.fail = fail

    def run_test(self, request):
        self.requests.append(request)
        if self.fail:
            raise TimeoutError("timed out")
        return ExecutionResult(summary=f"ran {request.test_identifier}")


def test_full_pass_without_services(two_group_dataset):
    state = run_pipeline(two_group_dataset, [_h1()], role_assignments={"score": "dependent"})
    assert [v.name for v in state["variables"]] == ["score", "group"]
    assert state["quality_summary"].total_missing == 0
    assert state["quality_summary"].duplicate_rows == 0
    assert [v.status for v in state["normality_verdicts"]] == [NormalityStatus.UNKNOWN]
    assert state["decisions"]["H1"].recommended_test == "Independent Samples T-Test"
    assert state["model_family"] is None
    assert state["errors"] == []
    assert "execution_results" not in state


def test_normality_service_failure_is_recorded(two_group_dataset):
    state = run_pipeline(two_group_dataset, [_h1()], normality_source=FailingSource())
    assert state["normality_verdicts"][0].status == NormalityStatus.UNKNOWN
    assert len(state["errors"]) == 1
    assert "service unavailable" in state["errors"][0]
    assert state["decisions"]["H1"].recommended_test == "Independent Samples T-Test"


def test_violated_normality_runs_the_fallback(two_group_dataset):
    source = CannedNormalitySource({
        "score": FormalNormalityResult(variable="score", test_name="Shapiro-Wilk",
                                       statistic=0.81, p_value=0.001, is_normal=False),
    })
    executor = RecordingExecutor()
    state = run_pipeline(two_group_dataset, [_h1()], normality_source=source, test_executor=executor)
    assert state["tests_to_run"] == {"H1": "Mann-Whitney U Test"}
    assert executor.requests[0].test_identifier == "mann-whitney"
    assert executor.requests[0].grouping_variable == "group"
    assert state["execution_results"]["H1"].summary == "ran mann-whitney"


def test_executor_failure_does_not_abort(two_group_dataset):
    state = run_pipeline(two_group_dataset, [_h1()], test_executor=RecordingExecutor(fail=True))
    assert state["execution_results"] == {}
    assert "timed out" in state["errors"][0]
    assert state["decisions"]["H1"].recommended_test == "Independent Samples T-Test"


def test_insufficient_hypothesis_and_design_selection(two_group_dataset):
    state = run_pipeline(
        two_group_dataset,
        [Hypothesis(id="H2", type="difference")],
        design_selection={"dependent": ["score"], "factors": ["group"]},
        test_executor=RecordingExecutor(),
    )
    assert isinstance(state["decisions"]["H2"], InsufficientInput)
    assert state["model_family"].family == ModelFamily.ONE_WAY_ANOVA
    assert state["execution_results"] == {}


def test_dataset_without_columns_stops_after_profiling():
    state = run_pipeline(Dataset(column_names=[], records=[]))
    assert state["variables"] == []
    assert "decisions" not in state
