"""Answer lookup and comparison shared by the requirement variants.

Requirements reference a prior step by identifier and compare its answer
with an expected value.  Two rules hold for every variant that uses these
helpers:

  - an absent snapshot entry, a ``None`` entry, and an entry whose value is
    ``None`` all count as "no answer";
  - comparisons never raise: a value that cannot be compared (e.g. text
    against a numeric threshold) simply does not satisfy the requirement.

Operators are registered in ``OPERATORS``; each takes ``(answer, value)``
and returns a bool.
"""

from __future__ import annotations

import logging
import operator
import re
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from c3pro_questionnaire.models.result import ResultSnapshot

logger = logging.getLogger(__name__)

# Sentinel returned by answer_for() when no answer exists.
MISSING = object()

# Operators whose expected value is a collection of candidates.
COLLECTION_OPERATORS = frozenset({"contains_any", "contains_all"})


def answer_for(snapshot: ResultSnapshot, identifier: str) -> Any:
    """Return the raw answer value for *identifier*, or ``MISSING``."""
    result = snapshot.get(identifier)
    if result is None or result.value is None:
        return MISSING
    return result.value


# ---------------------------------------------------------------------------
# Numeric operators
# ---------------------------------------------------------------------------

def _as_number(x: Any) -> float | None:
    # bool is an int subclass; "True > 0" is not a meaningful threshold
    if isinstance(x, bool):
        return None
    try:
        return float(x)
    except (TypeError, ValueError):
        return None


def _threshold(test: Callable[[float, float], bool]) -> Callable[[Any, Any], bool]:
    def check(answer: Any, value: Any) -> bool:
        lhs, rhs = _as_number(answer), _as_number(value)
        if lhs is None or rhs is None:
            return False
        return test(lhs, rhs)
    return check


def _between(answer: Any, value: Any) -> bool:
    """Inclusive range check; *value* is ``[min, max]``."""
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return False
    num, lo, hi = _as_number(answer), _as_number(value[0]), _as_number(value[1])
    if num is None or lo is None or hi is None:
        return False
    return lo <= num <= hi


# ---------------------------------------------------------------------------
# Membership operators
# ---------------------------------------------------------------------------

def _holds(answer: Any, candidate: Any) -> bool:
    # list answers (multiple choice) match by element, anything else by substring
    if isinstance(answer, (list, tuple)):
        return candidate in answer
    return str(candidate) in str(answer)


def _contains_any(answer: Any, value: Any) -> bool:
    return any(_holds(answer, v) for v in value)


def _contains_all(answer: Any, value: Any) -> bool:
    return all(_holds(answer, v) for v in value)


def _matches(answer: Any, value: Any) -> bool:
    try:
        return re.search(str(value), str(answer)) is not None
    except re.error:
        logger.warning("Invalid regex in requirement: %r", value)
        return False


OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "eq": operator.eq,
    "ne": operator.ne,
    "lt": _threshold(operator.lt),
    "le": _threshold(operator.le),
    "gt": _threshold(operator.gt),
    "ge": _threshold(operator.ge),
    "between": _between,
    "contains": _holds,
    "not_contains": lambda answer, value: not _holds(answer, value),
    "contains_any": _contains_any,
    "contains_all": _contains_all,
    "matches": _matches,
}


def compare(op: str, answer: Any, value: Any) -> bool:
    """Apply operator *op* to an answer and an expected value.

    Numeric operators coerce strings (answers typed in by a user or read
    from a definition file).  Unknown operators and expected values of the
    wrong shape log a warning and evaluate to False.
    """
    check = OPERATORS.get(op)
    if check is None:
        logger.warning("Unknown requirement operator: %s", op)
        return False
    if op in COLLECTION_OPERATORS and not isinstance(value, (list, tuple, set, frozenset)):
        logger.warning("Operator %s expects a list of values, got %r", op, value)
        return False
    return bool(check(answer, value))
