"""Turn date ranges into concrete, canonical calendar dates.

Both parser tiers emit :class:`ParsedDateRange` objects and funnel them
through :func:`to_canonical`, so their output shape and ordering match.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

import structlog

from .models import CanonicalParseResult, ParsedDateRange

LOGGER = structlog.get_logger(__name__)

MAX_DATES_PER_RANGE = 500
ONE_DAY = timedelta(days=1)


def expand_range(date_range: ParsedDateRange, *, limit: int = MAX_DATES_PER_RANGE) -> list[date]:
    """Return the ascending dates a single range denotes, capped at ``limit``."""
    dates: list[date] = []
    current = date_range.start
    while current <= date_range.end:
        if date_range.days_of_week is None or current.weekday() in date_range.days_of_week:
            if len(dates) >= limit:
                LOGGER.debug(
                    "expansion.truncated",
                    start=date_range.start.isoformat(),
                    end=date_range.end.isoformat(),
                    limit=limit,
                )
                break
            dates.append(current)
        if current == date.max:
            break
        current += ONE_DAY
    return dates


def expand_ranges(
    ranges: Iterable[ParsedDateRange], *, limit: int = MAX_DATES_PER_RANGE
) -> dict[date, list[str]]:
    """Map every date covered by ``ranges`` to the union of its ranges' times.

    Keys come back in ascending order; each time list keeps first-seen order.
    """
    slots, _ = _collect(ranges, limit)
    return slots


def to_canonical(
    title: str, ranges: Iterable[ParsedDateRange], *, limit: int = MAX_DATES_PER_RANGE
) -> CanonicalParseResult:
    """Collapse ranges into a :class:`CanonicalParseResult`."""
    slots, times = _collect(ranges, limit)
    return CanonicalParseResult(title=title, dates=list(slots), times=times)


def _collect(
    ranges: Iterable[ParsedDateRange], limit: int
) -> tuple[dict[date, list[str]], list[str]]:
    slots: dict[date, list[str]] = {}
    all_times: list[str] = []
    for date_range in ranges:
        expanded = expand_range(date_range, limit=limit)
        if not expanded:
            continue
        range_times = date_range.times or ()
        for time_of_day in range_times:
            if time_of_day not in all_times:
                all_times.append(time_of_day)
        for value in expanded:
            times = slots.setdefault(value, [])
            for time_of_day in range_times:
                if time_of_day not in times:
                    times.append(time_of_day)
    return {value: slots[value] for value in sorted(slots)}, all_times
