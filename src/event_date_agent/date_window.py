"""Recurrence presets producing Friday-to-Sunday weekend windows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import List

from dateutil.relativedelta import relativedelta

from .models import Weekday
from .utils import month_end

WEEKEND_INDICES = {Weekday.FRIDAY, Weekday.SATURDAY, Weekday.SUNDAY}


@dataclass(frozen=True)
class WeekendWindow:
    """A Friday, Saturday and Sunday triple."""

    friday: date

    @property
    def days(self) -> List[date]:
        return [self.friday + timedelta(days=offset) for offset in range(3)]

    @property
    def iso(self) -> List[str]:
        return [value.isoformat() for value in self.days]

    def following(self, weeks: int = 1) -> "WeekendWindow":
        return WeekendWindow(self.friday + timedelta(weeks=weeks))


def current_or_next_weekend(reference_date: date, *, upcoming_only: bool) -> WeekendWindow:
    """
    Pick the weekend a "this weekend" preset refers to.

    When ``reference_date`` is already a Friday, Saturday or Sunday and
    ``upcoming_only`` is false, that weekend is used. Otherwise the first
    weekend whose Friday is strictly after ``reference_date``.
    """
    weekday = reference_date.weekday()
    if weekday in WEEKEND_INDICES and not upcoming_only:
        return WeekendWindow(reference_date - timedelta(days=weekday - Weekday.FRIDAY))
    days_until_friday = (Weekday.FRIDAY - weekday) % 7 or 7
    return WeekendWindow(reference_date + timedelta(days=days_until_friday))


def this_weekend(reference_date: date, upcoming_only: bool) -> List[str]:
    """ISO dates of this weekend's Friday, Saturday and Sunday."""
    return current_or_next_weekend(reference_date, upcoming_only=upcoming_only).iso


def next_weekends(reference_date: date, n: int, upcoming_only: bool) -> List[str]:
    """ISO dates of ``n`` consecutive weekends starting at :func:`this_weekend`."""
    if n < 1:
        raise ValueError(f"n must be at least 1, got {n}")
    first = current_or_next_weekend(reference_date, upcoming_only=upcoming_only)
    dates: List[str] = []
    for index in range(n):
        dates.extend(first.following(index).iso)
    return dates


def quarterly_weekends(reference_date: date) -> List[str]:
    """
    Every weekend whose Friday falls between ``reference_date`` and the last
    day of the month two calendar months later, both inclusive.
    """
    horizon_month = reference_date + relativedelta(months=2)
    horizon = month_end(horizon_month.year, horizon_month.month)

    days_until_friday = (Weekday.FRIDAY - reference_date.weekday()) % 7
    window = WeekendWindow(reference_date + timedelta(days=days_until_friday))

    dates: List[str] = []
    while window.friday <= horizon:
        dates.extend(window.iso)
        window = window.following()
    return dates
