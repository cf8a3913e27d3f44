"""
FILE: core/derived_views.py
----------------------------
Memoized derived views of a Dataset.

Profiles, descriptives and quality summaries are pure functions of the
dataset, so they are cached by Dataset.fingerprint() and recomputed only
when a new dataset (or a new variable assignment) arrives.
"""

import json
import logging

from Schemas.dataset import Dataset, Variable
from Schemas.data_profiler_schema import VariableProfilerOutput
from Schemas.data_quality import QualitySummary
from Schemas.descriptive import DescriptiveOutput
from core.descriptive_engine import describe_dataset
from core.profiler_engine import profile_variables
from core.quality_engine import assess_data_quality

logger = logging.getLogger(__name__)


def _variables_key(variables: list[Variable]) -> str:
    return json.dumps(
        [[v.name, v.measurement_level.value] for v in variables]
    )


class DerivedViews:
    def __init__(self):
        self._profiles: dict[str, VariableProfilerOutput] = {}
        self._descriptives: dict[tuple[str, str], DescriptiveOutput] = {}
        self._quality: dict[str, QualitySummary] = {}

    def profile(self, dataset: Dataset) -> VariableProfilerOutput:
        key = dataset.fingerprint()
        if key not in self._profiles:
            logger.debug("Profiling dataset %s", key[:12])
            self._profiles[key] = profile_variables(dataset)
        return self._profiles[key]

    def describe(self, dataset: Dataset, variables: list[Variable] | None = None) -> DescriptiveOutput:
        if variables is None:
            variables = self.profile(dataset).variables
        key = (dataset.fingerprint(), _variables_key(variables))
        if key not in self._descriptives:
            self._descriptives[key] = describe_dataset(dataset, variables)
        return self._descriptives[key]

    def quality(self, dataset: Dataset) -> QualitySummary:
        key = dataset.fingerprint()
        if key not in self._quality:
            self._quality[key] = assess_data_quality(dataset, self.profile(dataset))
        return self._quality[key]

    def clear(self) -> None:
        self._profiles.clear()
        self._descriptives.clear()
        self._quality.clear()
