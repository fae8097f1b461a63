"""Questionnaire definitions — builds step sequences from FHIR Questionnaires.

A definition is a FHIR ``Questionnaire`` resource stored as YAML or JSON.
Each item becomes one step, in document order:

  - ``display`` and ``group`` items become instruction steps
  - items with ``enableWhen`` become conditional steps; every condition is
    translated 1:1 into a requirement
  - children of a ``group`` follow the group and inherit its requirements

enableWhen translation:

  | condition                              | requirement                      |
  |----------------------------------------|----------------------------------|
  | hasAnswer: b  /  operator: exists      | PresenceRequirement(has_answer=b)|
  | operator "=" / "!=" (or no operator)   | AnswerRequirement eq / ne        |
  | operator ">", "<", ">=", "<="          | ThresholdRequirement             |

When the referenced item is a repeating choice, "=" and "!=" become
``contains`` / ``not_contains`` because its answer is a list of codes.
Items may also carry a native ``requirements`` list (dicts with a ``kind``
field) for conditions FHIR cannot express, e.g. ``between``.

Usage::

    store = QuestionnaireStore()        # defaults to questionnaires/ at repo root
    store.load()
    seq = store.get_sequence("smoking-history")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import TypeAdapter

from c3pro_questionnaire.constants import (
    DEFINITION_SUFFIXES,
    FHIR_ITEM_TYPE_FORMATS,
    QUESTIONNAIRE_DIR,
)
from c3pro_questionnaire.errors import QuestionnaireDefinitionError
from c3pro_questionnaire.models.requirement import (
    AnswerRequirement,
    PresenceRequirement,
    Requirement,
    ThresholdRequirement,
)
from c3pro_questionnaire.models.result import AnswerFormat
from c3pro_questionnaire.models.step import ConditionalStep, Step
from c3pro_questionnaire.sequence import StepSequence

logger = logging.getLogger(__name__)

_requirements_adapter = TypeAdapter(list[Requirement])

# FHIR enableWhen.operator → requirement op
_EQUALITY_OPERATORS = {"=": "eq", "!=": "ne"}
_THRESHOLD_OPERATORS = {">": "gt", "<": "lt", ">=": "ge", "<=": "le"}


# ---------------------------------------------------------------------------
# Definition files
# ---------------------------------------------------------------------------

def default_questionnaire_dir() -> Path:
    """Directory the store reads when none is configured.

    ``C3PRO_QUESTIONNAIRE_DIR`` wins; otherwise the nearest ``questionnaires``
    directory above this package (the repo checkout), else ``./questionnaires``.
    """
    if QUESTIONNAIRE_DIR:
        return Path(QUESTIONNAIRE_DIR)
    for ancestor in Path(__file__).resolve().parents:
        candidate = ancestor / "questionnaires"
        if candidate.is_dir():
            return candidate
    return Path.cwd() / "questionnaires"


def read_definition(path: Path | str) -> dict:
    """Parse one definition file (YAML, or JSON via the YAML parser).

    Raises:
        FileNotFoundError: if *path* does not exist.
        QuestionnaireDefinitionError: if the file is not valid YAML or its
            top level is not a mapping.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Missing definition file: {path}")
    try:
        definition = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise QuestionnaireDefinitionError(f"Cannot parse {path.name}: {exc}") from exc
    if not isinstance(definition, dict):
        raise QuestionnaireDefinitionError(f"{path.name} does not contain a Questionnaire mapping")
    return definition


# ---------------------------------------------------------------------------
# Definition → StepSequence
# ---------------------------------------------------------------------------

def _condition_answer(cond: dict, link_id: str) -> Any:
    """Pull the expected value out of an ``answer[x]`` field."""
    for key, value in cond.items():
        if not key.startswith("answer"):
            continue
        if key == "answerCoding" and isinstance(value, dict):
            return value.get("code")
        return value
    raise QuestionnaireDefinitionError(
        f"enableWhen of item '{link_id}' has no answer value"
    )


def requirement_from_condition(
    cond: dict,
    link_id: str,
    formats: dict[str, AnswerFormat | None] | None = None,
):
    """Translate one FHIR enableWhen condition into a requirement.

    Args:
        cond: the enableWhen dict
        link_id: linkId of the item owning the condition (for error messages)
        formats: answer formats of the items seen so far, keyed by linkId

    Raises:
        QuestionnaireDefinitionError: for a missing question reference,
            a missing answer value or an unknown operator.
    """
    question = cond.get("question")
    if not question:
        raise QuestionnaireDefinitionError(
            f"enableWhen of item '{link_id}' does not reference a question"
        )

    operator = cond.get("operator")
    # STU3 style: {question, hasAnswer}
    if operator is None and "hasAnswer" in cond:
        return PresenceRequirement(question=question, has_answer=bool(cond["hasAnswer"]))
    if operator == "exists":
        return PresenceRequirement(
            question=question, has_answer=bool(_condition_answer(cond, link_id))
        )

    operator = operator or "="
    expected = _condition_answer(cond, link_id)

    if operator in _EQUALITY_OPERATORS:
        op = _EQUALITY_OPERATORS[operator]
        if (formats or {}).get(question) == AnswerFormat.MULTIPLE_CHOICE:
            op = "contains" if op == "eq" else "not_contains"
        return AnswerRequirement(question=question, op=op, value=expected)

    if operator in _THRESHOLD_OPERATORS:
        return ThresholdRequirement(
            question=question, op=_THRESHOLD_OPERATORS[operator], value=expected
        )

    raise QuestionnaireDefinitionError(
        f"Unknown enableWhen operator '{operator}' in item '{link_id}'"
    )


def _answer_format(item: dict) -> AnswerFormat | None:
    item_type = item.get("type", "display")
    if item_type not in FHIR_ITEM_TYPE_FORMATS:
        logger.warning(
            "Item %s has unknown type %r, treating as unsupported",
            item.get("linkId"), item_type,
        )
        return AnswerFormat.UNSUPPORTED
    fmt = FHIR_ITEM_TYPE_FORMATS[item_type]
    if fmt == AnswerFormat.SINGLE_CHOICE and item.get("repeats"):
        return AnswerFormat.MULTIPLE_CHOICE
    return fmt


def _build_steps(
    items: list[dict],
    inherited: list,
    formats: dict[str, AnswerFormat | None],
    out: list[Step],
) -> None:
    """Append one step per item (depth first) to *out*."""
    for item in items:
        link_id = item.get("linkId")
        if not link_id:
            raise QuestionnaireDefinitionError(f"Questionnaire item without linkId: {item!r}")

        conditions = item.get("enableWhen") or []
        behavior = item.get("enableBehavior", "all")
        if behavior != "all" and len(conditions) > 1:
            raise QuestionnaireDefinitionError(
                f"enableBehavior '{behavior}' of item '{link_id}' is not supported"
            )

        fmt = _answer_format(item)
        requirements = list(inherited)
        requirements.extend(
            requirement_from_condition(cond, link_id, formats) for cond in conditions
        )
        requirements.extend(_requirements_adapter.validate_python(item.get("requirements") or []))

        common = dict(
            identifier=link_id,
            title=item.get("prefix"),
            text=item.get("text"),
            answer_format=fmt,
            optional=not item.get("required", False),
        )
        if requirements:
            step: Step = ConditionalStep(**common, requirements=requirements)
        else:
            step = Step(**common)
        out.append(step)
        formats[link_id] = fmt

        children = item.get("item") or []
        if children:
            _build_steps(children, requirements, formats, out)


def sequence_from_questionnaire(definition: dict) -> StepSequence:
    """Build a :class:`StepSequence` from a FHIR Questionnaire dict.

    Raises:
        QuestionnaireDefinitionError: if the definition cannot be translated.
        MalformedSequenceError: if it has no items or duplicate linkIds.
    """
    if not isinstance(definition, dict):
        raise QuestionnaireDefinitionError("Questionnaire definition must be a mapping")
    identifier = definition.get("id")
    if not identifier:
        raise QuestionnaireDefinitionError("Questionnaire definition has no id")

    steps: list[Step] = []
    _build_steps(definition.get("item") or [], [], {}, steps)
    return StepSequence(identifier, steps)


def load_questionnaire(path: Path | str) -> StepSequence:
    """Load a single definition file into a :class:`StepSequence`."""
    return sequence_from_questionnaire(read_definition(path))


# ---------------------------------------------------------------------------
# QuestionnaireStore
# ---------------------------------------------------------------------------

class QuestionnaireStore:
    """Loads every questionnaire definition in a directory.

    Attributes populated after :meth:`load`:

        sequences — dict[questionnaire id, StepSequence]
        sources   — dict[questionnaire id, Path of the definition file]
    """

    def __init__(self, questionnaire_dir: str | Path | None = None) -> None:
        if questionnaire_dir is None:
            questionnaire_dir = default_questionnaire_dir()
        self._base = Path(questionnaire_dir)

        # Populated by load()
        self.sequences: dict[str, StepSequence] = {}
        self.sources: dict[str, Path] = {}

    def load(self) -> None:
        """Parse all definition files under the questionnaire directory.

        Call this once at startup.  Raises ``FileNotFoundError`` if the
        directory is missing and ``QuestionnaireDefinitionError`` if two files
        define the same questionnaire id.
        """
        if not self._base.is_dir():
            raise FileNotFoundError(f"Missing questionnaire directory: {self._base}")

        for path in sorted(self._base.iterdir()):
            if path.suffix.lower() not in DEFINITION_SUFFIXES:
                continue
            seq = load_questionnaire(path)
            if seq.identifier in self.sequences:
                raise QuestionnaireDefinitionError(
                    f"Questionnaire '{seq.identifier}' defined in both "
                    f"{self.sources[seq.identifier].name} and {path.name}"
                )
            self.sequences[seq.identifier] = seq
            self.sources[seq.identifier] = path

        logger.info(
            "QuestionnaireStore loaded %d questionnaires from %s",
            len(self.sequences), self._base,
        )

    def identifiers(self) -> list[str]:
        """Questionnaire ids in load order."""
        return list(self.sequences)

    def get_sequence(self, identifier: str) -> StepSequence:
        """Look up a loaded questionnaire by id.

        Raises:
            KeyError: if no questionnaire with that id was loaded.
        """
        return self.sequences[identifier]
