"""Step models — the units a questionnaire session presents one at a time.

Every step answers :meth:`Step.is_visible`.  Plain steps are always
visible; a :class:`ConditionalStep` is visible only while all of its
requirements are satisfied by the answers collected so far.  The navigator
calls ``is_visible`` on every candidate and never inspects step classes.

``answer_format`` is ``None`` for instruction (display-only) steps.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from c3pro_questionnaire.models.requirement import Requirement
from c3pro_questionnaire.models.result import AnswerFormat, ResultSnapshot


class Step(BaseModel):
    """A questionnaire step that is shown unconditionally.

    ``identifier`` should be identical to the linkId of the questionnaire
    item the step was built from; it keys the step's answer in the result
    snapshot and in the response document.
    """

    identifier: str
    title: Optional[str] = None
    text: Optional[str] = None
    answer_format: Optional[AnswerFormat] = None
    optional: bool = True

    @property
    def is_instruction(self) -> bool:
        """True for display-only steps that collect no answer."""
        return self.answer_format is None

    def is_visible(self, snapshot: ResultSnapshot) -> bool:
        return True


_requirement_adapter = TypeAdapter(Requirement)


class ConditionalStep(Step):
    """A step that is only shown when all of its requirements are met.

    Requirements are checked every time before the step is displayed,
    against the latest answers.  A conditional step without requirements is
    always visible.

    ``requirements`` accepts requirement models, plain dicts (parsed through
    the ``Requirement`` union on ``kind``) and any other object that
    implements ``is_satisfied_by(snapshot)``.
    """

    requirements: List[Any] = Field(default_factory=list)

    @field_validator("requirements", mode="before")
    @classmethod
    def _parse_requirements(cls, v: Any) -> Any:
        if v is None:
            return []
        try:
            return [_as_requirement(item) for item in v]
        except TypeError as exc:
            raise ValueError(str(exc)) from exc

    def add_requirement(self, requirement) -> None:
        """Append a requirement that has to be met for the step to be shown."""
        self.requirements.append(_as_requirement(requirement))

    def add_requirements(self, requirements: Iterable) -> None:
        """Append several requirements, keeping their order."""
        self.requirements.extend(_as_requirement(r) for r in requirements)

    def requirements_are_satisfied_by(self, snapshot: ResultSnapshot) -> bool:
        """True iff every requirement is satisfied (vacuously true when empty)."""
        return all(req.is_satisfied_by(snapshot) for req in self.requirements)

    def is_visible(self, snapshot: ResultSnapshot) -> bool:
        return self.requirements_are_satisfied_by(snapshot)


def _as_requirement(item: Any) -> Any:
    if isinstance(item, dict):
        return _requirement_adapter.validate_python(item)
    if not callable(getattr(item, "is_satisfied_by", None)):
        raise TypeError(f"{type(item).__name__} has no is_satisfied_by(snapshot) method")
    return item
