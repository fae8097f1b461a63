"""Navigator — finds the next/previous visible step in an ordered sequence.

Stateless: every call works only on what it is given (the ordered steps,
the reference step and the current result snapshot).  Visibility is
re-evaluated on every call and never cached, because a later answer can
change whether a not-yet-shown conditional step should appear.

Both directions move a cursor one position at a time, skipping steps whose
``is_visible`` check fails, so a call inspects at most ``len(steps)``
candidates.

Position lookup is by object identity, not by identifier or equality: a
step object that is not part of the sequence has no neighbours and both
directions return ``None``.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from c3pro_questionnaire.models.result import ResultSnapshot
from c3pro_questionnaire.models.step import Step

logger = logging.getLogger(__name__)


def index_of(steps: Sequence[Step], step: Step) -> int:
    """Position of *step* in *steps* by identity, or -1 if absent."""
    for i, candidate in enumerate(steps):
        if candidate is step:
            return i
    return -1


def next_visible_step(
    steps: Sequence[Step],
    from_step: Optional[Step],
    snapshot: ResultSnapshot,
) -> Step | None:
    """Return the first visible step after *from_step*, or None at the end.

    Pass ``None`` as *from_step* to get the first visible step of the
    session.
    """
    if from_step is None:
        cursor = 0
    else:
        position = index_of(steps, from_step)
        if position < 0:
            logger.debug("Step %s is not part of the sequence", from_step.identifier)
            return None
        cursor = position + 1

    while cursor < len(steps):
        candidate = steps[cursor]
        if candidate.is_visible(snapshot):
            return candidate
        logger.debug("Skipping step %s: requirements not met", candidate.identifier)
        cursor += 1
    return None


def previous_visible_step(
    steps: Sequence[Step],
    from_step: Optional[Step],
    snapshot: ResultSnapshot,
) -> Step | None:
    """Return the last visible step before *from_step*, or None at the start."""
    if from_step is None:
        return None
    position = index_of(steps, from_step)
    if position < 0:
        logger.debug("Step %s is not part of the sequence", from_step.identifier)
        return None

    cursor = position - 1
    while cursor >= 0:
        candidate = steps[cursor]
        if candidate.is_visible(snapshot):
            return candidate
        logger.debug("Skipping step %s: requirements not met", candidate.identifier)
        cursor -= 1
    return None
