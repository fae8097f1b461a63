"""Requirement models — predicates that gate conditional steps.

A requirement inspects the answers collected so far and says whether it is
satisfied.  The engine only ever calls :meth:`is_satisfied_by`; any object
with that method can be attached to a :class:`ConditionalStep`.

Variants shipped with the SDK:

  - AnswerRequirement: compare a prior answer with an expected value
      (eq, ne, contains, not_contains, contains_any, contains_all, matches)
  - ThresholdRequirement: numeric comparison of a prior answer
      (lt, le, gt, ge, between)
  - PresenceRequirement: whether a prior answer exists at all

An unanswered prior step never satisfies an Answer or Threshold requirement.
PresenceRequirement with ``has_answer=False`` is the one variant that is
satisfied by a missing answer.

The discriminated ``Requirement`` union uses ``kind`` as its discriminator
so definitions can be deserialised straight from YAML dicts.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, model_validator

from c3pro_questionnaire.evaluator import COLLECTION_OPERATORS, MISSING, answer_for, compare
from c3pro_questionnaire.models.result import ResultSnapshot


class BaseRequirement(BaseModel):
    """Fields shared by all requirement variants.

    ``question`` is the identifier of the step whose answer is inspected.
    """

    question: str

    def is_satisfied_by(self, snapshot: ResultSnapshot) -> bool:
        raise NotImplementedError


class AnswerRequirement(BaseRequirement):
    """Satisfied when the referenced answer compares true against ``value``."""

    kind: Literal["answer"] = "answer"
    op: Literal[
        "eq", "ne", "contains", "not_contains",
        "contains_any", "contains_all", "matches",
    ] = "eq"
    value: Any

    @model_validator(mode="after")
    def _check_candidate_list(self) -> "AnswerRequirement":
        """contains_any / contains_all need a list of candidates, not a scalar."""
        if self.op in COLLECTION_OPERATORS and not isinstance(self.value, (list, tuple)):
            raise ValueError(
                f"{self.op} on '{self.question}' requires a list value, "
                f"got {type(self.value).__name__}"
            )
        return self

    def is_satisfied_by(self, snapshot: ResultSnapshot) -> bool:
        answer = answer_for(snapshot, self.question)
        if answer is MISSING:
            return False
        return compare(self.op, answer, self.value)


class ThresholdRequirement(BaseRequirement):
    """Satisfied when the referenced numeric answer passes the threshold.

    For ``between`` the value is ``[min, max]``, both ends inclusive.
    """

    kind: Literal["threshold"] = "threshold"
    op: Literal["lt", "le", "gt", "ge", "between"]
    value: Any

    def is_satisfied_by(self, snapshot: ResultSnapshot) -> bool:
        answer = answer_for(snapshot, self.question)
        if answer is MISSING:
            return False
        return compare(self.op, answer, self.value)


class PresenceRequirement(BaseRequirement):
    """Satisfied when the referenced step has (or has not) been answered."""

    kind: Literal["presence"] = "presence"
    has_answer: bool = True

    def is_satisfied_by(self, snapshot: ResultSnapshot) -> bool:
        answered = answer_for(snapshot, self.question) is not MISSING
        return answered == self.has_answer


# Discriminated union: Pydantic picks the right type based on the "kind" field.
Requirement = Annotated[
    Union[AnswerRequirement, ThresholdRequirement, PresenceRequirement],
    Field(discriminator="kind"),
]
