"""Calendar and text helpers shared by the parsers and presets."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

import structlog
from dateutil.relativedelta import relativedelta
from zoneinfo import ZoneInfo

LOGGER = structlog.get_logger(__name__)


def get_zone(timezone_name: str) -> ZoneInfo:
    """Return a ZoneInfo instance, defaulting to UTC on failure."""
    try:
        return ZoneInfo(timezone_name)
    except Exception:  # pragma: no cover - fallback
        LOGGER.warning("timezone.unknown", timezone=timezone_name, fallback="UTC")
        return ZoneInfo("UTC")


def today_in_timezone(timezone_name: str) -> date:
    """Current calendar date in the configured timezone.

    Only the outer surfaces call this; parsers and presets take the reference
    date as an argument.
    """
    return datetime.now(tz=get_zone(timezone_name)).date()


def month_start(year: int, month: int) -> date:
    return date(year, month, 1)


def month_end(year: int, month: int) -> date:
    """Last day of the given month."""
    return date(year, month, 1) + relativedelta(months=1, days=-1)


def quarter_bounds(year: int, quarter: int) -> tuple[date, date]:
    """First and last calendar day of quarter ``quarter`` (1-4) of ``year``."""
    if not 1 <= quarter <= 4:
        raise ValueError(f"Quarter must be between 1 and 4, got {quarter}")
    first_month = 3 * (quarter - 1) + 1
    return month_start(year, first_month), month_end(year, first_month + 2)


def safe_date(year: int, month: int, day: int) -> Optional[date]:
    """Build a date, returning ``None`` for impossible combinations like Feb 30."""
    try:
        return date(year, month, day)
    except ValueError:
        return None


def normalise_whitespace(text: str) -> str:
    """Collapse repeated whitespace into single spaces."""
    return re.sub(r"\s+", " ", text or "").strip()


def preview(text: str, limit: int = 40) -> str:
    """Short prefix of user text, safe to put in a log line."""
    cleaned = normalise_whitespace(text)
    return cleaned if len(cleaned) <= limit else cleaned[:limit] + "..."
