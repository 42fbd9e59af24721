"""Natural-language date extraction for event polls."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("event-date-agent")
except PackageNotFoundError:  # pragma: no cover - fallback during local dev
    __version__ = "0.0.0"

from .date_window import next_weekends, quarterly_weekends, this_weekend
from .errors import EventDateError, InputValidationError, SchemaViolationError, TextGenerationError
from .expansion import MAX_DATES_PER_RANGE, expand_range, expand_ranges, to_canonical
from .llm_parser import LLMDateParser
from .models import CanonicalParseResult, LLMParseResult, ParseContext, ParsedDateRange, Weekday
from .pattern_parser import parse_event_description
from .reconciler import DateReconciler
from .sanitizer import build_generation_request, sanitize_input
from .service import (
    generate_next_weekends,
    generate_quarterly_weekends,
    generate_this_weekend,
    parse_date_from_natural_language,
    parse_event_description_smart,
)

__all__ = [
    "__version__",
    "CanonicalParseResult",
    "DateReconciler",
    "EventDateError",
    "InputValidationError",
    "LLMDateParser",
    "LLMParseResult",
    "MAX_DATES_PER_RANGE",
    "ParseContext",
    "ParsedDateRange",
    "SchemaViolationError",
    "TextGenerationError",
    "Weekday",
    "build_generation_request",
    "expand_range",
    "expand_ranges",
    "generate_next_weekends",
    "generate_quarterly_weekends",
    "generate_this_weekend",
    "next_weekends",
    "parse_date_from_natural_language",
    "parse_event_description",
    "parse_event_description_smart",
    "quarterly_weekends",
    "sanitize_input",
    "this_weekend",
    "to_canonical",
]
