from pathlib import Path

import pytest

from c3pro_questionnaire.models import StepResult
from c3pro_questionnaire.questionnaire import load_questionnaire

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


def make_result(identifier, value=None, answer_format="text"):
    """Shorthand to build a StepResult."""
    return StepResult(identifier=identifier, answer_format=answer_format, value=value)


@pytest.fixture(scope="session")
def fixtures_dir():
    return FIXTURES_DIR


@pytest.fixture
def smoking_sequence():
    """Fresh StepSequence of the smoking-history fixture for each test."""
    return load_questionnaire(FIXTURES_DIR / "smoking_history.yaml")
