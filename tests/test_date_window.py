"""Tests for the weekend recurrence presets."""

from datetime import date, timedelta

import pytest

from event_date_agent.date_window import (
    current_or_next_weekend,
    next_weekends,
    quarterly_weekends,
    this_weekend,
)

WEDNESDAY = date(2025, 1, 8)
SATURDAY = date(2025, 1, 11)


def as_dates(values):
    return [date.fromisoformat(value) for value in values]


class TestThisWeekend:
    def test_from_midweek(self):
        dates = as_dates(this_weekend(WEDNESDAY, True))
        assert len(dates) == 3
        assert [value.weekday() for value in dates] == [4, 5, 6]
        assert dates[1] - dates[0] == dates[2] - dates[1] == timedelta(days=1)
        assert dates[0] == date(2025, 1, 10)

    def test_during_weekend_upcoming_only(self):
        assert this_weekend(SATURDAY, True) == ["2025-01-17", "2025-01-18", "2025-01-19"]

    def test_during_weekend_current(self):
        assert this_weekend(SATURDAY, False) == ["2025-01-10", "2025-01-11", "2025-01-12"]

    def test_on_friday_upcoming_only_skips_to_next(self):
        assert current_or_next_weekend(date(2025, 1, 10), upcoming_only=True).friday == date(2025, 1, 17)

    def test_midweek_ignores_upcoming_flag(self):
        assert this_weekend(WEDNESDAY, False) == this_weekend(WEDNESDAY, True)


class TestNextWeekends:
    def test_four_weekends(self):
        dates = as_dates(next_weekends(WEDNESDAY, 4, True))
        assert len(dates) == 12
        groups = [dates[index:index + 3] for index in range(0, 12, 3)]
        for group in groups:
            assert [value.weekday() for value in group] == [4, 5, 6]
        for previous, current in zip(groups, groups[1:]):
            assert current[0] - previous[0] == timedelta(days=7)

    def test_starts_with_this_weekend(self):
        assert next_weekends(SATURDAY, 2, False)[:3] == this_weekend(SATURDAY, False)

    def test_rejects_non_positive(self):
        with pytest.raises(ValueError):
            next_weekends(WEDNESDAY, 0, True)


class TestQuarterlyWeekends:
    def test_horizon_is_end_of_second_month(self):
        dates = quarterly_weekends(date(2025, 1, 6))
        assert len(dates) == 36
        assert dates[0] == "2025-01-10"
        assert dates[-1] == "2025-03-30"

    def test_includes_reference_friday(self):
        assert quarterly_weekends(date(2025, 1, 10))[0] == "2025-01-10"

    def test_all_groups_are_weekends(self):
        dates = as_dates(quarterly_weekends(date(2025, 11, 20)))
        assert all(value.weekday() in (4, 5, 6) for value in dates)
        assert max(dates[::3]) <= date(2026, 1, 31)

    def test_pure(self):
        assert quarterly_weekends(WEDNESDAY) == quarterly_weekends(WEDNESDAY)
