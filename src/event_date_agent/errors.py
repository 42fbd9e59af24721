"""Exception hierarchy for the event date agent.

Parse failures are not exceptions: an unparseable description yields a result
with no dates. The types below cover the boundary cases around that outcome.
"""


class EventDateError(Exception):
    """Base exception for all event date agent errors."""


class InputValidationError(EventDateError, ValueError):
    """Input text is missing, empty, or longer than the accepted bound.

    Raised by the outer surfaces (CLI, HTTP) before any parser runs.
    """


class TextGenerationError(EventDateError):
    """The text-generation service failed, timed out, or answered non-2xx.

    Caught inside the LLM-assisted parser and converted to a parse failure.
    """


class SchemaViolationError(EventDateError):
    """The text-generation service answered with JSON of the wrong shape.

    Handled exactly like :class:`TextGenerationError`.
    """
