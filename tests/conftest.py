import numpy as np
import pytest

from Schemas.dataset import MeasurementLevel, Variable
from tests.helpers import make_dataset


@pytest.fixture
def rng():
    return np.random.default_rng(20240601)


@pytest.fixture
def two_group_dataset(rng):
    """40 rows: continuous score, string group with two levels."""
    scores = rng.normal(50, 10, size=40).round(3).tolist()
    groups = ["control", "treatment"] * 20
    return make_dataset(score=scores, group=groups)


@pytest.fixture
def three_group_dataset(rng):
    scores = rng.normal(50, 10, size=45).round(3).tolist()
    groups = ["a", "b", "c"] * 15
    return make_dataset(score=scores, group=groups)


@pytest.fixture
def score_variables():
    return [
        Variable(name="score", measurement_level=MeasurementLevel.CONTINUOUS),
        Variable(name="group", measurement_level=MeasurementLevel.NOMINAL),
    ]
