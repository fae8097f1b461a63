"""Response mapper tests — snapshot → ResponseDocument.

Encoding reference (from mapper._ENCODERS):
    boolean                        → valueBoolean
    single_choice, multiple_choice → valueString
    integer                        → valueInteger
    text                           → valueString
    date                           → valueDate (epoch milliseconds)
    anything else                  → empty answer
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from c3pro_questionnaire import mapper
from c3pro_questionnaire.constants import resolve_timezone
from c3pro_questionnaire.mapper import (
    build_response,
    encode_answer,
    step_result_to_item,
    task_result_to_response,
)
from c3pro_questionnaire.models import (
    AnswerFormat,
    AnswerValue,
    ResponseStatus,
    StepResult,
    TaskResult,
)

from conftest import make_result


# =====================================================================
# encode_answer: one test per format
# =====================================================================


class TestEncodeAnswer:

    def test_boolean(self):
        answer = encode_answer(make_result("q", True, "boolean"))
        assert answer.value_boolean is True
        assert answer.to_fhir() == {"valueBoolean": True}

    def test_boolean_false_is_kept(self):
        answer = encode_answer(make_result("q", False, "boolean"))
        assert answer.value_boolean is False
        assert not answer.is_empty

    def test_single_choice_as_text(self):
        answer = encode_answer(make_result("q", "cigars", "single_choice"))
        assert answer.to_fhir() == {"valueString": "cigars"}

    def test_multiple_choice_joined(self):
        answer = encode_answer(make_result("q", ["cigars", "pipes"], "multiple_choice"))
        assert answer.value_string == "cigars, pipes"

    def test_integer(self):
        answer = encode_answer(make_result("q", 12, "integer"))
        assert answer.to_fhir() == {"valueInteger": 12}

    def test_text(self):
        answer = encode_answer(make_result("q", "hello", "text"))
        assert answer.value_string == "hello"

    def test_date_from_epoch_millis(self):
        answer = encode_answer(make_result("q", 0, "date"))
        assert answer.value_date == date(1970, 1, 1)
        assert answer.to_fhir() == {"valueDate": "1970-01-01"}

    def test_date_from_later_epoch_millis(self):
        # 2016-05-23T12:00:00Z
        millis = int(datetime(2016, 5, 23, 12, tzinfo=timezone.utc).timestamp() * 1000)
        assert encode_answer(make_result("q", millis, "date")).value_date == date(2016, 5, 23)

    def test_date_in_configured_timezone(self, monkeypatch):
        """Epoch 0 is still 31 December in a zone west of UTC."""
        monkeypatch.setattr(mapper, "RESPONSE_DATE_TZ", timezone(timedelta(hours=-5)))
        assert encode_answer(make_result("q", 0, "date")).value_date == date(1969, 12, 31)

    def test_date_from_date_objects(self):
        assert encode_answer(make_result("q", date(2020, 2, 29), "date")).value_date == date(2020, 2, 29)
        assert encode_answer(
            make_result("q", datetime(2020, 2, 29, 8, 30), "date")
        ).value_date == date(2020, 2, 29)

    @pytest.mark.parametrize("fmt", ["scale", "decimal", "eligibility", "location", "time_of_day", "form"])
    def test_unimplemented_formats_are_empty(self, fmt):
        answer = encode_answer(make_result("q", 3, fmt))
        assert answer.is_empty
        assert answer.to_fhir() == {}

    @pytest.mark.parametrize("tag, expected", [
        ("Boolean", AnswerFormat.BOOLEAN),
        ("SingleChoice", AnswerFormat.SINGLE_CHOICE),
        ("MultipleChoice", AnswerFormat.MULTIPLE_CHOICE),
        ("Integer", AnswerFormat.INTEGER),
        ("Text", AnswerFormat.TEXT),
        ("Date", AnswerFormat.DATE),
        ("Unsupported", AnswerFormat.UNSUPPORTED),
        ("TimeOfDay", AnswerFormat.TIME_OF_DAY),
        ("DateAndTime", AnswerFormat.DATE_AND_TIME),
        ("TimeInterval", AnswerFormat.TIME_INTERVAL),
        ("multiple-choice", AnswerFormat.MULTIPLE_CHOICE),
        ("MULTIPLE_CHOICE", AnswerFormat.MULTIPLE_CHOICE),
        ("single choice", AnswerFormat.SINGLE_CHOICE),
    ])
    def test_format_tag_spellings(self, tag, expected):
        """CamelCase, hyphenated and upper-case tags map to the same format."""
        assert make_result("q", None, tag).answer_format is expected

    def test_camel_case_multiple_choice_is_encoded(self):
        answer = encode_answer(make_result("q", ["a", "b"], "MultipleChoice"))
        assert answer.value_string == "a, b"

    def test_unknown_format_tag_is_unsupported(self):
        result = make_result("q", "x", "hologram")
        assert result.answer_format is AnswerFormat.UNSUPPORTED
        assert encode_answer(result).is_empty

    def test_wrong_value_type_is_empty(self):
        """A string tagged integer is not guessed at — it encodes as empty."""
        assert encode_answer(make_result("q", "twelve", "integer")).is_empty
        assert encode_answer(make_result("q", "yes", "boolean")).is_empty
        assert encode_answer(make_result("q", 42, "text")).is_empty
        assert encode_answer(make_result("q", "yesterday", "date")).is_empty

    def test_bool_is_not_an_integer(self):
        assert encode_answer(make_result("q", True, "integer")).is_empty


# =====================================================================
# Date timezone configuration
# =====================================================================


class TestResolveTimezone:

    def test_utc_any_case(self):
        assert resolve_timezone("UTC") is timezone.utc
        assert resolve_timezone("utc") is timezone.utc

    @pytest.mark.parametrize("name", ["Not/AZone", "", "../etc/passwd"])
    def test_unknown_zone_rejected(self, name):
        """A bad zone name fails when it is resolved, not per date answer."""
        with pytest.raises(ValueError, match="Unknown timezone"):
            resolve_timezone(name)


# =====================================================================
# step_result_to_item
# =====================================================================


class TestStepResultToItem:

    def test_none_result(self):
        assert step_result_to_item("q1", None) is None

    def test_none_value(self):
        assert step_result_to_item("q1", make_result("q1", None, "text")) is None

    def test_link_id_is_snapshot_key(self):
        item = step_result_to_item("q1", make_result("q1", "x", "text"))
        assert item.link_id == "q1"
        assert item.to_fhir() == {"linkId": "q1", "answer": [{"valueString": "x"}]}


# =====================================================================
# build_response
# =====================================================================


class TestBuildResponse:

    def test_mixed_snapshot(self):
        """Boolean, text and date answers produce three typed items."""
        snapshot = {
            "q1": make_result("q1", True, "boolean"),
            "q2": make_result("q2", "hello", "text"),
            "q3": make_result("q3", 0, "date"),
        }
        doc = build_response("task-1", snapshot)

        assert doc.id == "task-1"
        assert doc.status is ResponseStatus.COMPLETED
        assert doc.link_ids == ["q1", "q2", "q3"]
        assert doc.get_item("q1").answer.value_boolean is True
        assert doc.get_item("q2").answer.value_string == "hello"
        assert doc.get_item("q3").answer.value_date == date(1970, 1, 1)

    def test_skips_entries_without_answer(self):
        snapshot = {
            "intro": make_result("intro", None, "none"),
            "q1": make_result("q1", "a", "text"),
            "q2": None,
        }
        doc = build_response("task-1", snapshot)
        assert doc.link_ids == ["q1"]
        assert len(doc.items) <= len(snapshot)

    def test_unsupported_entry_does_not_abort(self):
        snapshot = {
            "q1": make_result("q1", 7, "scale"),
            "q2": make_result("q2", "fine", "text"),
        }
        doc = build_response("task-1", snapshot)
        assert doc.link_ids == ["q1", "q2"]
        assert doc.get_item("q1").answer.is_empty
        assert doc.get_item("q2").answer.value_string == "fine"

    def test_preserves_snapshot_order(self):
        snapshot = {k: make_result(k, k, "text") for k in ["z", "a", "m"]}
        assert build_response("t", snapshot).link_ids == ["z", "a", "m"]

    def test_empty_snapshot(self):
        doc = build_response("t", {})
        assert doc.items == []
        assert doc.status is ResponseStatus.COMPLETED

    def test_idempotent(self):
        snapshot = {
            "q1": make_result("q1", True, "boolean"),
            "q2": make_result("q2", ["a", "b"], "multiple_choice"),
        }
        assert build_response("t", snapshot) == build_response("t", snapshot)

    def test_does_not_mutate_snapshot(self):
        result = make_result("q1", ["a", "b"], "multiple_choice")
        snapshot = {"q1": result, "q2": None}
        build_response("t", snapshot)
        assert snapshot == {"q1": result, "q2": None}
        assert result.value == ["a", "b"]

    def test_questionnaire_reference(self):
        doc = build_response("t", {}, questionnaire="smoking-history")
        assert doc.questionnaire == "smoking-history"

    def test_to_fhir(self):
        doc = build_response("task-1", {"q1": make_result("q1", 3, "integer")})
        assert doc.to_fhir() == {
            "resourceType": "QuestionnaireResponse",
            "id": "task-1",
            "status": "completed",
            "item": [{"linkId": "q1", "answer": [{"valueInteger": 3}]}],
        }

    def test_unsupported_item_serialises_empty_answer(self):
        doc = build_response("t", {"q1": make_result("q1", 1.5, "decimal")})
        assert doc.to_fhir()["item"] == [{"linkId": "q1", "answer": [{}]}]


class TestTaskResultToResponse:

    def test_uses_task_identifier(self):
        task = TaskResult(
            identifier="task-9",
            results={"q1": StepResult(identifier="q1", answer_format="text", value="ok")},
        )
        doc = task_result_to_response(task)
        assert doc.id == "task-9"
        assert doc.link_ids == ["q1"]


class TestAnswerValueModel:

    def test_populate_by_alias(self):
        answer = AnswerValue.model_validate({"valueString": "x"})
        assert answer.value == "x"

    def test_empty(self):
        assert AnswerValue().is_empty
