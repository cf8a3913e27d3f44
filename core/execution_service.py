"""
FILE: core/execution_service.py
--------------------------------
Seams to the remote test-execution service.

The engine never computes formal test statistics itself; it asks a
NormalityVerdictSource for normality results and hands TestExecutionRequests
to a TestExecutionService. Both are structural Protocols so callers can
plug in an HTTP client, a stub, or the local scipy checker below.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Protocol

import pandas as pd
from scipy import stats
from statsmodels.stats.diagnostic import lilliefors

from Schemas.assumption_checker import FormalNormalityResult
from Schemas.statistician import TestExecutionRequest, TestExecutionResult
from constants.assumption_checker import MIN_NORMALITY_N, NORMALITY_ALPHA, SHAPIRO_MAX_N

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────
# PROTOCOLS
# ─────────────────────────────────────────────

class NormalityVerdictSource(Protocol):
    def check_normality(
        self, variable: str, values: Sequence[float]
    ) -> FormalNormalityResult | None: ...


class TestExecutionService(Protocol):
    def run_test(self, request: TestExecutionRequest) -> TestExecutionResult: ...


# ─────────────────────────────────────────────
# LOCAL SOURCES
# ─────────────────────────────────────────────

class ScipyNormalityChecker:
    """
    Shapiro-Wilk below SHAPIRO_MAX_N observations, Kolmogorov-Smirnov with
    the Lilliefors correction from there on. Returns None when the sample
    is too small or constant.
    """

    def __init__(self, alpha: float = NORMALITY_ALPHA):
        self.alpha = alpha

    def check_normality(
        self, variable: str, values: Sequence[float]
    ) -> FormalNormalityResult | None:
        clean = pd.Series(list(values), dtype=float).dropna()
        n = len(clean)

        if n < MIN_NORMALITY_N or float(clean.std()) == 0.0:
            logger.debug("Skipping normality test for '%s' (n=%d)", variable, n)
            return None

        if n < SHAPIRO_MAX_N:
            stat, p = stats.shapiro(clean)
            test_name = "Shapiro-Wilk"
        else:
            stat, p = lilliefors(clean, dist="norm")
            test_name = "Kolmogorov-Smirnov"

        return FormalNormalityResult(
            variable=variable,
            test_name=test_name,
            statistic=float(stat),
            p_value=float(p),
            df=n,
            is_normal=bool(p >= self.alpha),
        )


class CannedNormalitySource:
    """Serves verdicts already returned by the remote service, keyed by variable."""

    def __init__(self, results: Mapping[str, FormalNormalityResult]):
        self.results = dict(results)

    def check_normality(
        self, variable: str, values: Sequence[float]
    ) -> FormalNormalityResult | None:
        return self.results.get(variable)
