"""QuestionnaireSession — drives one patient through a step sequence.

The session owns the result snapshot for its lifetime and is its only
writer.  Callers get a read-only view through :attr:`snapshot`.  Navigation
is delegated to the sequence, so visibility is always evaluated against the
answers recorded so far.

Typical flow::

    session = QuestionnaireSession(sequence, session_id="task-42")
    step = session.start()
    while step is not None:
        step = session.submit(ask_user(step))
    document = session.finish(sink)

``step_back`` moves to the previous visible step.  Answering a step again
replaces its earlier result; results of steps after it are kept.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any

from c3pro_questionnaire.interfaces import ResponseSink
from c3pro_questionnaire.mapper import build_response
from c3pro_questionnaire.models.response import ResponseDocument
from c3pro_questionnaire.models.result import (
    AnswerFormat,
    ResultSnapshot,
    StepResult,
    TaskResult,
)
from c3pro_questionnaire.models.step import Step
from c3pro_questionnaire.sequence import StepSequence

logger = logging.getLogger(__name__)


class QuestionnaireSession:
    """Stateful wrapper around a :class:`StepSequence` and its answers.

    Args:
        sequence: the questionnaire to present
        session_id: id of the resulting response document; a random UUID
            is used when omitted
    """

    def __init__(self, sequence: StepSequence, session_id: str | None = None) -> None:
        self._sequence = sequence
        self.session_id = session_id or str(uuid.uuid4())
        self._results: dict[str, StepResult | None] = {}
        self._current: Step | None = None
        self._started = False

    # ==================================================================
    # State
    # ==================================================================

    @property
    def sequence(self) -> StepSequence:
        return self._sequence

    @property
    def current_step(self) -> Step | None:
        return self._current

    @property
    def snapshot(self) -> ResultSnapshot:
        """Read-only view of the results recorded so far."""
        return MappingProxyType(self._results)

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def is_finished(self) -> bool:
        """True once the session has moved past the last visible step."""
        return self._started and self._current is None

    def progress(self) -> tuple[int, int]:
        """``(position, total)`` of the current step, position counted from 1."""
        if self._current is None:
            return (len(self._sequence) if self.is_finished else 0, len(self._sequence))
        return self._sequence.progress_of(self._current)

    def task_result(self) -> TaskResult:
        """Copy of the recorded results as a :class:`TaskResult`."""
        return TaskResult(identifier=self.session_id, results=dict(self._results))

    # ==================================================================
    # Navigation
    # ==================================================================

    def start(self) -> Step | None:
        """Move to the first visible step and return it.

        Returns None for a questionnaire whose steps are all hidden.
        """
        if self._started:
            raise ValueError(f"Session {self.session_id} has already been started")
        self._started = True
        self._current = self._sequence.step_after(None, self.snapshot)
        logger.debug(
            "Session %s started at %s", self.session_id,
            self._current.identifier if self._current else "<end>",
        )
        return self._current

    def advance(self) -> Step | None:
        """Move to the next visible step without recording an answer."""
        self._require_current("advance")
        self._current = self._sequence.step_after(self._current, self.snapshot)
        if self._current is None:
            logger.debug("Session %s reached the end of %s", self.session_id, self._sequence.identifier)
        return self._current

    def step_back(self) -> Step:
        """Move to the previous visible step and return it.

        Raises:
            ValueError: if the session has not started, is finished, or is
                already at the first visible step.
        """
        self._require_current("step back")
        previous = self._sequence.step_before(self._current, self.snapshot)
        if previous is None:
            raise ValueError("Cannot step back: already at the first step")
        self._current = previous
        return previous

    # ==================================================================
    # Answers
    # ==================================================================

    def record(self, result: StepResult) -> None:
        """Store *result* in the snapshot, replacing an earlier answer.

        Raises:
            ValueError: if the result does not belong to a step of the
                sequence.
        """
        if self._sequence.get_step(result.identifier) is None:
            raise ValueError(
                f"Step '{result.identifier}' not found in sequence "
                f"'{self._sequence.identifier}'"
            )
        if result.identifier in self._results:
            logger.debug("Replacing result of step %s", result.identifier)
        self._results[result.identifier] = result

    def submit(self, value: Any = None) -> Step | None:
        """Record *value* as the answer to the current step and advance.

        The answer format is taken from the current step; instruction steps
        are recorded without a value.

        Returns:
            The next visible step, or None when the questionnaire is done.
        """
        step = self._require_current("submit")
        now = datetime.now(timezone.utc)
        self.record(
            StepResult(
                identifier=step.identifier,
                answer_format=step.answer_format or AnswerFormat.NONE,
                value=None if step.is_instruction else value,
                start_date=now,
                end_date=now,
            )
        )
        return self.advance()

    # ==================================================================
    # Completion
    # ==================================================================

    def build_response(self) -> ResponseDocument:
        """Build the response document for the finished session.

        Raises:
            ValueError: if the session has not reached the end yet.
        """
        if not self.is_finished:
            raise ValueError(
                f"Cannot build response: session {self.session_id} is not finished"
            )
        return build_response(self.session_id, self.snapshot, questionnaire=self._sequence.identifier)

    def finish(self, sink: ResponseSink) -> ResponseDocument:
        """Build the response document and hand it to *sink*."""
        document = self.build_response()
        sink.create(document)
        logger.info(
            "Session %s handed %d answers to %s",
            self.session_id, len(document.items), type(sink).__name__,
        )
        return document

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_current(self, action: str) -> Step:
        if not self._started:
            raise ValueError(f"Cannot {action}: session {self.session_id} has not been started")
        if self._current is None:
            raise ValueError(f"Cannot {action}: session {self.session_id} is finished")
        return self._current
