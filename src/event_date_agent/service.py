"""Public entry points used by poll forms, the chat bot and the HTTP API.

These are the only functions that fall back to "today" when no reference
date is given; everything underneath takes it explicitly.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from . import date_window
from .config import Settings
from .generation import TextGenerator, build_text_generator
from .llm_parser import LLMDateParser
from .models import CanonicalParseResult, ParseContext
from .pattern_parser import parse_event_description
from .reconciler import DateReconciler
from .utils import today_in_timezone


def default_context(settings: Optional[Settings] = None) -> ParseContext:
    """Context anchored on today's date in the configured timezone."""
    timezone = settings.timezone if settings is not None else "UTC"
    return ParseContext(reference_date=today_in_timezone(timezone))


def build_reconciler(settings: Settings, generator: Optional[TextGenerator] = None) -> DateReconciler:
    """Wire a reconciler from settings, using ``generator`` when given."""
    if generator is None:
        generator = build_text_generator(settings)
    llm_parser = (
        LLMDateParser(generator, timeout_seconds=settings.llm_timeout_seconds) if generator is not None else None
    )
    return DateReconciler(
        llm_parser,
        threshold=settings.confidence_threshold,
        every_window_weeks=settings.every_window_weeks,
    )


def parse_date_from_natural_language(text: str, context: Optional[ParseContext] = None) -> List[str]:
    """ISO dates from the offline grammar only. Never calls out.

    Callers validate length (1-200 characters) and emptiness beforehand.
    """
    context = context or default_context()
    return parse_event_description(text, context).iso_dates


async def parse_event_description_smart(
    text: str,
    context: Optional[ParseContext] = None,
    *,
    settings: Optional[Settings] = None,
    generator: Optional[TextGenerator] = None,
) -> CanonicalParseResult:
    """Full two-tier pipeline: grammar first, LLM fallback behind a confidence gate."""
    settings = settings or Settings()
    context = context or default_context(settings)
    return await build_reconciler(settings, generator).parse(text, context)


def generate_quarterly_weekends(reference_date: Optional[date] = None) -> List[str]:
    return date_window.quarterly_weekends(reference_date or default_context().reference_date)


def generate_next_weekends(n: int, upcoming_only: bool, reference_date: Optional[date] = None) -> List[str]:
    return date_window.next_weekends(reference_date or default_context().reference_date, n, upcoming_only)


def generate_this_weekend(upcoming_only: bool, reference_date: Optional[date] = None) -> List[str]:
    return date_window.this_weekend(reference_date or default_context().reference_date, upcoming_only)
