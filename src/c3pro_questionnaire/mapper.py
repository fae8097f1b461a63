"""Response mapper — turns a finished session's answers into a response document.

Each snapshot entry with an answer becomes one :class:`ResponseItem` whose
``link_id`` is the step identifier.  Entries without an answer are skipped.
The answer is encoded by the encoder registered for the entry's
``AnswerFormat`` tag:

  | format                         | encoded as                   |
  |--------------------------------|------------------------------|
  | boolean                        | valueBoolean                 |
  | single_choice, multiple_choice | valueString (lists joined)   |
  | integer                        | valueInteger                 |
  | text                           | valueString                  |
  | date                           | valueDate (from epoch ms)    |
  | anything else                  | empty answer                 |

Choice answers are kept as plain text until structured choice answers are
supported.  A value that does not fit its format (e.g. a string tagged
``integer``) is logged and encoded as an empty answer; one bad entry never
aborts the document.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Optional

from c3pro_questionnaire.constants import (
    MULTIPLE_CHOICE_SEPARATOR,
    RESPONSE_DATE_TZ,
    RESPONSE_STATUS_COMPLETED,
)
from c3pro_questionnaire.models.response import (
    AnswerValue,
    ResponseDocument,
    ResponseItem,
    ResponseStatus,
)
from c3pro_questionnaire.models.result import (
    AnswerFormat,
    ResultSnapshot,
    StepResult,
    TaskResult,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Encoders, one per supported answer format
# ---------------------------------------------------------------------------

def _encode_boolean(value: Any) -> AnswerValue:
    if not isinstance(value, bool):
        raise TypeError(f"expected bool, got {type(value).__name__}")
    return AnswerValue(value_boolean=value)


def _encode_choice(value: Any) -> AnswerValue:
    if isinstance(value, (list, tuple)):
        return AnswerValue(value_string=MULTIPLE_CHOICE_SEPARATOR.join(str(v) for v in value))
    return AnswerValue(value_string=str(value))


def _encode_integer(value: Any) -> AnswerValue:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected int, got {type(value).__name__}")
    return AnswerValue(value_integer=value)


def _encode_text(value: Any) -> AnswerValue:
    if not isinstance(value, str):
        raise TypeError(f"expected str, got {type(value).__name__}")
    return AnswerValue(value_string=value)


def _encode_date(value: Any) -> AnswerValue:
    # datetime is a date subclass, so check it first
    if isinstance(value, datetime):
        return AnswerValue(value_date=value.date())
    if isinstance(value, date):
        return AnswerValue(value_date=value)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected epoch milliseconds, got {type(value).__name__}")
    moment = datetime.fromtimestamp(value / 1000, tz=RESPONSE_DATE_TZ)
    return AnswerValue(value_date=moment.date())


_ENCODERS: dict[AnswerFormat, Callable[[Any], AnswerValue]] = {
    AnswerFormat.BOOLEAN: _encode_boolean,
    AnswerFormat.SINGLE_CHOICE: _encode_choice,
    AnswerFormat.MULTIPLE_CHOICE: _encode_choice,
    AnswerFormat.INTEGER: _encode_integer,
    AnswerFormat.TEXT: _encode_text,
    AnswerFormat.DATE: _encode_date,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def encode_answer(step_result: StepResult) -> AnswerValue:
    """Encode the value of *step_result* according to its answer format.

    Returns an empty :class:`AnswerValue` for formats without an encoder
    and for values that do not fit their format.
    """
    encoder = _ENCODERS.get(step_result.answer_format)
    if encoder is None:
        logger.warning(
            "Answer format %s of step %s is not supported, emitting empty answer",
            step_result.answer_format.value, step_result.identifier,
        )
        return AnswerValue()
    try:
        return encoder(step_result.value)
    except (TypeError, ValueError, OverflowError, OSError) as exc:
        logger.warning(
            "Could not encode %s answer of step %s: %s",
            step_result.answer_format.value, step_result.identifier, exc,
        )
        return AnswerValue()


def step_result_to_item(link_id: str, step_result: Optional[StepResult]) -> ResponseItem | None:
    """Build the response item for one snapshot entry.

    Returns None when there is no result or the result has no value.
    """
    if step_result is None or not step_result.has_value:
        return None
    return ResponseItem(link_id=link_id, answer=encode_answer(step_result))


def build_response(
    session_id: str,
    snapshot: ResultSnapshot,
    *,
    questionnaire: str | None = None,
) -> ResponseDocument:
    """Build the response document for a completed session.

    Items follow the iteration order of *snapshot*.  The snapshot is only
    read, never modified.

    Args:
        session_id: becomes the document id
        snapshot: step identifier → StepResult for every completed step
        questionnaire: optional reference to the questionnaire definition

    Returns:
        A ResponseDocument with status ``completed``.
    """
    items: list[ResponseItem] = []
    for link_id, step_result in snapshot.items():
        item = step_result_to_item(link_id, step_result)
        if item is None:
            logger.debug("No answer for step %s, skipping", link_id)
            continue
        items.append(item)

    logger.debug(
        "Built response %s: %d items from %d results", session_id, len(items), len(snapshot)
    )
    return ResponseDocument(
        id=session_id,
        status=ResponseStatus(RESPONSE_STATUS_COMPLETED),
        questionnaire=questionnaire,
        items=items,
    )


def task_result_to_response(task_result: TaskResult, *, questionnaire: str | None = None) -> ResponseDocument:
    """Build the response document for a :class:`TaskResult`."""
    return build_response(task_result.identifier, task_result.results, questionnaire=questionnaire)
