"""Exceptions raised at the SDK boundary.

Everything the engine can recover from locally (unanswered prior questions,
navigation past either end, unsupported answer formats) is handled with a
defined fallback value and never raises.  The errors here are caller
contract violations.  Both subclass ``ValueError`` so callers that already
treat SDK ``ValueError`` as a bad request keep working.
"""


class MalformedSequenceError(ValueError):
    """A step sequence is empty or contains duplicate step identifiers."""


class QuestionnaireDefinitionError(ValueError):
    """A questionnaire definition cannot be translated into steps."""
