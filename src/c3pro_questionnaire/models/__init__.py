"""Public model re-exports for c3pro_questionnaire.

Consumers should import from ``c3pro_questionnaire.models`` rather than
reaching into sub-modules directly.
"""

# --- Results ---
from c3pro_questionnaire.models.result import (
    AnswerFormat,
    ResultSnapshot,
    StepResult,
    TaskResult,
)

# --- Requirements ---
from c3pro_questionnaire.models.requirement import (
    AnswerRequirement,
    BaseRequirement,
    PresenceRequirement,
    Requirement,
    ThresholdRequirement,
)

# --- Steps ---
from c3pro_questionnaire.models.step import ConditionalStep, Step

# --- Response document ---
from c3pro_questionnaire.models.response import (
    AnswerValue,
    ResponseDocument,
    ResponseItem,
    ResponseStatus,
)

__all__ = [
    # Results
    "AnswerFormat",
    "ResultSnapshot",
    "StepResult",
    "TaskResult",
    # Requirements
    "AnswerRequirement",
    "BaseRequirement",
    "PresenceRequirement",
    "Requirement",
    "ThresholdRequirement",
    # Steps
    "ConditionalStep",
    "Step",
    # Response
    "AnswerValue",
    "ResponseDocument",
    "ResponseItem",
    "ResponseStatus",
]
