"""c3pro_questionnaire — conditional questionnaire engine.

Decides which questionnaire step to show next given the answers collected
so far, and turns a finished session's answers into a FHIR-shaped
QuestionnaireResponse document.  No network I/O, no persistence, no UI.

Public API:
    StepSequence          — ordered, validated list of steps with navigation
    QuestionnaireSession  — drives one session: start, submit, step back, finish
    QuestionnaireStore    — loads FHIR Questionnaire definitions from YAML/JSON
    next_visible_step     — first visible step after a reference step
    previous_visible_step — last visible step before a reference step
    build_response        — result snapshot → ResponseDocument
    encode_answer         — StepResult → typed AnswerValue

Sync boundary:
    ResponseSink          — ABC for the external upload/download subsystem
    DocumentReceiver      — ABC for documents delivered back by a sink
"""

from c3pro_questionnaire.errors import MalformedSequenceError, QuestionnaireDefinitionError
from c3pro_questionnaire.interfaces import DocumentReceiver, ResponseSink
from c3pro_questionnaire.mapper import (
    build_response,
    encode_answer,
    step_result_to_item,
    task_result_to_response,
)
from c3pro_questionnaire.models import (
    AnswerFormat,
    AnswerRequirement,
    AnswerValue,
    ConditionalStep,
    PresenceRequirement,
    Requirement,
    ResponseDocument,
    ResponseItem,
    ResponseStatus,
    ResultSnapshot,
    Step,
    StepResult,
    TaskResult,
    ThresholdRequirement,
)
from c3pro_questionnaire.navigator import next_visible_step, previous_visible_step
from c3pro_questionnaire.questionnaire import (
    QuestionnaireStore,
    load_questionnaire,
    sequence_from_questionnaire,
)
from c3pro_questionnaire.sequence import StepSequence
from c3pro_questionnaire.session import QuestionnaireSession

__all__ = [
    # Engine
    "StepSequence",
    "QuestionnaireSession",
    "QuestionnaireStore",
    "load_questionnaire",
    "sequence_from_questionnaire",
    "next_visible_step",
    "previous_visible_step",
    # Mapper
    "build_response",
    "encode_answer",
    "step_result_to_item",
    "task_result_to_response",
    # Sync boundary
    "DocumentReceiver",
    "ResponseSink",
    # Errors
    "MalformedSequenceError",
    "QuestionnaireDefinitionError",
    # Models
    "AnswerFormat",
    "AnswerRequirement",
    "AnswerValue",
    "ConditionalStep",
    "PresenceRequirement",
    "Requirement",
    "ResponseDocument",
    "ResponseItem",
    "ResponseStatus",
    "ResultSnapshot",
    "Step",
    "StepResult",
    "TaskResult",
    "ThresholdRequirement",
]
