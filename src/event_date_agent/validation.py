"""Boundary checks on incoming text and on parsed events."""

from __future__ import annotations

from datetime import date
from typing import List

from .errors import InputValidationError
from .models import CanonicalParseResult

MAX_INPUT_LENGTH = 200
MIN_TITLE_LENGTH = 3
MAX_TITLE_LENGTH = 100
MAX_DATES = 50


def validate_input_text(text: str | None, *, max_length: int = MAX_INPUT_LENGTH) -> str:
    """Return the stripped text, or raise if it is empty or too long."""
    if text is None or not text.strip():
        raise InputValidationError("Input text is required")
    stripped = text.strip()
    if len(stripped) > max_length:
        raise InputValidationError(f"Input text must be at most {max_length} characters")
    return stripped


def validate_parsed_event(result: CanonicalParseResult, reference_date: date) -> List[str]:
    """List what would stop ``result`` from becoming a poll. Empty means valid."""
    errors: List[str] = []

    if len(result.title) < MIN_TITLE_LENGTH:
        errors.append(f"Event title must be at least {MIN_TITLE_LENGTH} characters")
    if len(result.title) > MAX_TITLE_LENGTH:
        errors.append(f"Event title must be less than {MAX_TITLE_LENGTH} characters")

    if not result.dates:
        errors.append("At least one date must be specified")
    if len(result.dates) > MAX_DATES:
        errors.append(f"Maximum of {MAX_DATES} dates allowed")

    if any(value < reference_date for value in result.dates):
        errors.append("All dates must be on or after the reference date")

    return errors
