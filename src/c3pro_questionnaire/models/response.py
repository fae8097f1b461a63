"""Response document models — the canonical output of a finished session.

The shapes follow the FHIR ``QuestionnaireResponse`` resource:

  - ResponseDocument: ``id``, ``status`` and the ordered ``item`` list
  - ResponseItem: one answered step, keyed by ``linkId``
  - AnswerValue: a single typed answer (``valueBoolean``, ``valueInteger``,
    ``valueString`` or ``valueDate``), or empty for unsupported formats

Field names are snake_case in Python; :meth:`ResponseDocument.to_fhir`
produces the FHIR JSON representation handed to the sync sink.
"""

from __future__ import annotations

import enum
from datetime import date
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ResponseStatus(str, enum.Enum):
    """FHIR QuestionnaireResponse status codes.

    The mapper only ever writes COMPLETED; the other codes exist so
    documents read back through a sink validate.
    """

    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    AMENDED = "amended"
    ENTERED_IN_ERROR = "entered-in-error"
    STOPPED = "stopped"


class AnswerValue(BaseModel):
    """A single typed answer.  At most one ``value_*`` field is set."""

    model_config = ConfigDict(populate_by_name=True)

    value_boolean: Optional[bool] = Field(default=None, alias="valueBoolean")
    value_integer: Optional[int] = Field(default=None, alias="valueInteger")
    value_string: Optional[str] = Field(default=None, alias="valueString")
    value_date: Optional[date] = Field(default=None, alias="valueDate")

    @property
    def is_empty(self) -> bool:
        return self.value is None

    @property
    def value(self) -> Any:
        """The one value that is set, or None for an empty answer."""
        for v in (self.value_boolean, self.value_integer, self.value_string, self.value_date):
            if v is not None:
                return v
        return None

    def to_fhir(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ResponseItem(BaseModel):
    """The answer given to one step, linked by the step identifier."""

    model_config = ConfigDict(populate_by_name=True)

    link_id: str = Field(alias="linkId")
    answer: AnswerValue

    def to_fhir(self) -> dict:
        return {"linkId": self.link_id, "answer": [self.answer.to_fhir()]}


class ResponseDocument(BaseModel):
    """A completed questionnaire session, ready for the sync sink."""

    id: str
    status: ResponseStatus = ResponseStatus.COMPLETED
    questionnaire: Optional[str] = None
    items: List[ResponseItem] = Field(default_factory=list)

    @property
    def link_ids(self) -> list[str]:
        return [item.link_id for item in self.items]

    def get_item(self, link_id: str) -> ResponseItem | None:
        """Return the item answering *link_id*, or None."""
        for item in self.items:
            if item.link_id == link_id:
                return item
        return None

    def to_fhir(self) -> dict:
        """Serialise to a FHIR QuestionnaireResponse JSON dict."""
        resource: dict[str, Any] = {
            "resourceType": "QuestionnaireResponse",
            "id": self.id,
            "status": self.status.value,
        }
        if self.questionnaire is not None:
            resource["questionnaire"] = self.questionnaire
        resource["item"] = [item.to_fhir() for item in self.items]
        return resource
