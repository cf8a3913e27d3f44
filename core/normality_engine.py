"""
FILE: core/normality_engine.py
-------------------------------
Pure engine for the Normality / Assumption Evaluator.
No LangChain or scipy dependencies — the formal test comes from a
NormalityVerdictSource (see core/execution_service.py).

The formal verdict decides parametric_allowed. The skewness/kurtosis shape
flags are context only, unless the caller opts into shape_veto.
"""

import logging
from collections.abc import Iterable, Mapping

from Schemas.assumption_checker import (
    FormalNormalityResult,
    NormalityStatus,
    NormalityVerdict,
)
from Schemas.descriptive import DescriptiveStats
from constants.assumption_checker import (
    KURTOSIS_VIOLATION_THRESHOLD,
    SHAPE_VETO_DEFAULT,
    SKEW_VIOLATION_THRESHOLD,
)

logger = logging.getLogger(__name__)


def _shape_note(skew_violation: bool, kurt_violation: bool, stats: DescriptiveStats) -> str:
    flags = []
    if skew_violation:
        flags.append(f"|skewness| = {abs(round(stats.skewness, 4))} > {SKEW_VIOLATION_THRESHOLD}")
    if kurt_violation:
        flags.append(f"|kurtosis| = {abs(round(stats.kurtosis, 4))} > {KURTOSIS_VIOLATION_THRESHOLD}")
    return ("Shape: " + ", ".join(flags) + ".") if flags else ""


def build_normality_verdict(
    stats: DescriptiveStats,
    formal: FormalNormalityResult | None,
    shape_veto: bool = SHAPE_VETO_DEFAULT,
) -> NormalityVerdict:
    """Combines one variable's shape statistics with its formal test result."""
    skew_violation = abs(stats.skewness) > SKEW_VIOLATION_THRESHOLD
    kurt_violation = abs(stats.kurtosis) > KURTOSIS_VIOLATION_THRESHOLD
    shape_note = _shape_note(skew_violation, kurt_violation, stats)

    # ── No formal verdict → unknown, never normal and never violated ──
    if formal is None:
        return NormalityVerdict(
            variable=stats.variable,
            skewness_violation=skew_violation,
            kurtosis_violation=kurt_violation,
            parametric_allowed=None,
            status=NormalityStatus.UNKNOWN,
            plain_reason=" ".join(
                part for part in ("No formal normality result available.", shape_note) if part
            ),
        )

    parametric_allowed = formal.is_normal
    if shape_veto and (skew_violation or kurt_violation):
        parametric_allowed = False

    verdict_text = (
        "Normality assumption met." if formal.is_normal
        else "Normality assumption violated."
    )
    reason = (
        f"{formal.test_name}: statistic={round(formal.statistic, 4)}, "
        f"p={round(formal.p_value, 4)}. {verdict_text}"
    )
    if shape_note:
        reason += " " + shape_note
    if shape_veto and formal.is_normal and not parametric_allowed:
        reason += " Shape flags veto parametric analysis."

    return NormalityVerdict(
        variable=stats.variable,
        test_name=formal.test_name,
        statistic=formal.statistic,
        p_value=formal.p_value,
        is_normal=formal.is_normal,
        skewness_violation=skew_violation,
        kurtosis_violation=kurt_violation,
        parametric_allowed=parametric_allowed,
        status=NormalityStatus.NORMAL if formal.is_normal else NormalityStatus.VIOLATED,
        plain_reason=reason,
    )


def evaluate_normality(
    descriptives: Iterable[DescriptiveStats],
    formal_results: Mapping[str, FormalNormalityResult] | Iterable[FormalNormalityResult] | None = None,
    shape_veto: bool = SHAPE_VETO_DEFAULT,
) -> list[NormalityVerdict]:
    """One verdict per continuous variable, in descriptive order."""
    if formal_results is None:
        by_variable: dict[str, FormalNormalityResult] = {}
    elif isinstance(formal_results, Mapping):
        by_variable = dict(formal_results)
    else:
        by_variable = {result.variable: result for result in formal_results}

    verdicts = [
        build_normality_verdict(stats, by_variable.get(stats.variable), shape_veto=shape_veto)
        for stats in descriptives
    ]
    logger.debug(
        "Normality verdicts: %s",
        {v.variable: v.status.value for v in verdicts},
    )
    return verdicts
