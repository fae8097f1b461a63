"""StepSequence — the ordered, fixed list of steps of one questionnaire.

A sequence is built once when the questionnaire definition is loaded and
never changes afterwards.  It validates itself at construction time and
delegates navigation to :mod:`c3pro_questionnaire.navigator`.

Usage::

    seq = StepSequence("smoking", [intro, smoker_detail, summary])
    first = seq.step_after(None, snapshot)
    nxt = seq.step_after(first, snapshot)
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Iterable, Optional

from c3pro_questionnaire.errors import MalformedSequenceError
from c3pro_questionnaire.models.result import ResultSnapshot
from c3pro_questionnaire.models.step import Step
from c3pro_questionnaire.navigator import (
    index_of,
    next_visible_step,
    previous_visible_step,
)


class StepSequence(Sequence):
    """An ordered collection of plain and conditional steps.

    Args:
        identifier: unique identifier of the questionnaire; should be
            identical to the id of the questionnaire definition
        steps: the steps in the order in which they should be presented

    Raises:
        MalformedSequenceError: if *steps* is empty or two steps share an
            identifier.
    """

    def __init__(self, identifier: str, steps: Iterable[Step]) -> None:
        self.identifier = identifier
        self._steps: tuple[Step, ...] = tuple(steps)
        self._validate()
        self._by_identifier = {s.identifier: s for s in self._steps}

    def _validate(self) -> None:
        if not self._steps:
            raise MalformedSequenceError(
                f"Sequence '{self.identifier}' must contain at least one step"
            )
        seen: set[str] = set()
        duplicates: list[str] = []
        for step in self._steps:
            if step.identifier in seen:
                duplicates.append(step.identifier)
            seen.add(step.identifier)
        if duplicates:
            raise MalformedSequenceError(
                f"Sequence '{self.identifier}' has duplicate step identifiers: "
                f"{', '.join(sorted(set(duplicates)))}"
            )

    # ------------------------------------------------------------------
    # Sequence protocol
    # ------------------------------------------------------------------

    def __getitem__(self, index):
        return self._steps[index]

    def __len__(self) -> int:
        return len(self._steps)

    def __repr__(self) -> str:
        return f"StepSequence({self.identifier!r}, {len(self._steps)} steps)"

    @property
    def steps(self) -> tuple[Step, ...]:
        return self._steps

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    def get_step(self, identifier: str) -> Step | None:
        """Look up a step by identifier.  Returns None if not found."""
        return self._by_identifier.get(identifier)

    def index_of(self, step: Step) -> int:
        """Position of the step object in the sequence, or -1."""
        return index_of(self._steps, step)

    def progress_of(self, step: Step) -> tuple[int, int]:
        """Return ``(position, total)`` for display, position counted from 1.

        Position is 0 for a step that is not part of the sequence.
        """
        return (self.index_of(step) + 1, len(self._steps))

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def step_after(self, step: Optional[Step], snapshot: ResultSnapshot) -> Step | None:
        """Next step whose requirements are met, or None at the end.

        Pass None as *step* to get the first step.
        """
        return next_visible_step(self._steps, step, snapshot)

    def step_before(self, step: Optional[Step], snapshot: ResultSnapshot) -> Step | None:
        """Previous step whose requirements are met, or None at the start."""
        return previous_visible_step(self._steps, step, snapshot)
