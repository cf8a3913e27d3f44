"""
FILE: core/model_family_engine.py
----------------------------------
Detects the ANOVA-family model implied by how many dependent variables,
between-subject factors and repeated measures the user has selected.
Top-to-bottom, first match wins.
"""

import logging

from Schemas.methodologist import ModelFamily, ModelFamilyDetection
from constants.decision_engine import (
    MANOVA,
    MIN_REPEATED_MEASURES,
    ONE_WAY_ANOVA,
    REPEATED_MEASURES,
    TWO_WAY_ANOVA,
)

logger = logging.getLogger(__name__)


def detect_model_family(
    n_dependent: int,
    n_factors: int,
    n_repeated: int = 0,
) -> ModelFamilyDetection | None:
    detection: ModelFamilyDetection | None = None

    if n_repeated >= MIN_REPEATED_MEASURES:
        detection = ModelFamilyDetection(
            family=ModelFamily.REPEATED_MEASURES_ANOVA,
            test_name=REPEATED_MEASURES,
            reason=f"{n_repeated} repeated measurements of the same subjects",
        )
    elif n_dependent >= 2 and n_factors >= 1:
        detection = ModelFamilyDetection(
            family=ModelFamily.MANOVA,
            test_name=MANOVA,
            reason=f"{n_dependent} dependent variables with {n_factors} factor(s)",
        )
    elif n_dependent == 1 and n_factors == 2:
        detection = ModelFamilyDetection(
            family=ModelFamily.TWO_WAY_ANOVA,
            test_name=TWO_WAY_ANOVA,
            reason="1 dependent variable with 2 factors",
        )
    elif n_dependent == 1 and n_factors == 1:
        detection = ModelFamilyDetection(
            family=ModelFamily.ONE_WAY_ANOVA,
            test_name=ONE_WAY_ANOVA,
            reason="1 dependent variable with 1 factor",
        )

    logger.debug(
        "Model family for dv=%d factors=%d repeated=%d → %s",
        n_dependent, n_factors, n_repeated,
        detection.family.value if detection else None,
    )
    return detection


def detect_model_family_from_selection(
    dependent: list[str],
    factors: list[str],
    repeated: list[str] | None = None,
) -> ModelFamilyDetection | None:
    return detect_model_family(len(dependent), len(factors), len(repeated or []))
