"""Questionnaire engine constants shared across the SDK.

These values are referenced by the mapper, the definition loader and the
questionnaire store.

Several constants can be overridden via environment variables so that
deployments can adjust conversions without code changes.
"""

import os
from datetime import timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from c3pro_questionnaire.models.result import AnswerFormat


def resolve_timezone(name: str) -> tzinfo:
    """Resolve an IANA zone name, raising ``ValueError`` for unknown zones."""
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise ValueError(f"Unknown timezone {name!r} in C3PRO_DATE_TIMEZONE") from exc


# Timezone used to turn epoch-millisecond date answers into calendar dates.
# Overridable via C3PRO_DATE_TIMEZONE env var (any IANA zone name); an
# unknown zone fails at import.
RESPONSE_DATE_TIMEZONE = os.getenv("C3PRO_DATE_TIMEZONE", "UTC")
RESPONSE_DATE_TZ: tzinfo = resolve_timezone(RESPONSE_DATE_TIMEZONE)

# Directory the QuestionnaireStore loads from when none is given.
# None → <repo root>/questionnaires.  Overridable via C3PRO_QUESTIONNAIRE_DIR.
QUESTIONNAIRE_DIR = os.getenv("C3PRO_QUESTIONNAIRE_DIR") or None

# Multiple-choice answers are encoded as a single text value joined by this.
# Overridable via C3PRO_CHOICE_SEPARATOR env var.
MULTIPLE_CHOICE_SEPARATOR = os.getenv("C3PRO_CHOICE_SEPARATOR", ", ")

# Status written into every response document built by the mapper.
RESPONSE_STATUS_COMPLETED = "completed"

# FHIR Questionnaire item.type → AnswerFormat.  "display" and "group" items
# carry no answer and become instruction steps.
FHIR_ITEM_TYPE_FORMATS: dict[str, AnswerFormat | None] = {
    "display": None,
    "group": None,
    "boolean": AnswerFormat.BOOLEAN,
    "choice": AnswerFormat.SINGLE_CHOICE,
    "open-choice": AnswerFormat.SINGLE_CHOICE,
    "integer": AnswerFormat.INTEGER,
    "string": AnswerFormat.TEXT,
    "text": AnswerFormat.TEXT,
    "date": AnswerFormat.DATE,
    "decimal": AnswerFormat.DECIMAL,
    "dateTime": AnswerFormat.DATE_AND_TIME,
    "time": AnswerFormat.TIME_OF_DAY,
}

# File suffixes the QuestionnaireStore picks up.  JSON is parsed by the YAML
# loader as well.
DEFINITION_SUFFIXES: tuple[str, ...] = (".yaml", ".yml", ".json")
