"""Result models — what the step-presentation layer hands to the engine.

Every completed step produces a ``StepResult`` tagged with the
``AnswerFormat`` of the step that collected it.  The mapper dispatches on
that tag, never on the Python type of the value.

A ``ResultSnapshot`` is the identifier-keyed mapping of results collected
so far in a session.  A key is present only after its step was completed;
a ``None`` value is tolerated and treated like an absent answer.
"""

from __future__ import annotations

import enum
import logging
import re
from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


class AnswerFormat(str, enum.Enum):
    """Answer shape of a step.

    Only BOOLEAN, SINGLE_CHOICE, MULTIPLE_CHOICE, INTEGER, TEXT and DATE are
    encoded into response documents.  The remaining members are formats the
    presentation layer knows about but the mapper does not encode yet; they
    produce an empty answer, as does UNSUPPORTED.
    """

    BOOLEAN = "boolean"
    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"
    INTEGER = "integer"
    TEXT = "text"
    DATE = "date"

    NONE = "none"
    SCALE = "scale"
    DECIMAL = "decimal"
    ELIGIBILITY = "eligibility"
    TIME_OF_DAY = "time_of_day"
    DATE_AND_TIME = "date_and_time"
    TIME_INTERVAL = "time_interval"
    LOCATION = "location"
    FORM = "form"

    UNSUPPORTED = "unsupported"


def normalise_format_tag(tag: Any) -> str:
    """Turn a format tag in any common spelling into the enum value.

    ``MultipleChoice``, ``multiple-choice``, ``MULTIPLE_CHOICE`` and
    ``multiple choice`` all become ``multiple_choice``.
    """
    text = str(tag).strip()
    text = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", text)
    return re.sub(r"[-\s]+", "_", text).lower()


class StepResult(BaseModel):
    """The answer collected for a single step.

    ``value`` holds the native value (bool, str, int, list of str, epoch
    milliseconds, ...).  ``None`` means the step was completed without an
    answer, e.g. an instruction step or a skipped optional question.
    """

    identifier: str
    answer_format: AnswerFormat = AnswerFormat.NONE
    value: Any = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("answer_format", mode="before")
    @classmethod
    def _coerce_unknown_format(cls, v: Any) -> Any:
        if v is None:
            return AnswerFormat.NONE
        if isinstance(v, AnswerFormat):
            return v
        try:
            return AnswerFormat(normalise_format_tag(v))
        except ValueError:
            logger.warning("Unknown answer format %r, treating as unsupported", v)
            return AnswerFormat.UNSUPPORTED

    @property
    def has_value(self) -> bool:
        return self.value is not None


# Identifier-keyed answers collected so far in a session.
ResultSnapshot = Mapping[str, Optional[StepResult]]


class TaskResult(BaseModel):
    """All step results of one questionnaire session.

    ``identifier`` becomes the id of the response document built from it.
    ``results`` keeps insertion order, which the mapper preserves.
    """

    identifier: str
    results: dict[str, Optional[StepResult]] = Field(default_factory=dict)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
