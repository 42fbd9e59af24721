"""Shared data models used across the event date agent."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from enum import IntEnum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

TIME_OF_DAY_RE = re.compile(r"^(?:[01]\d|2[0-3]):[0-5]\d$")


class Weekday(IntEnum):
    """Day of week, numbered like :meth:`datetime.date.weekday`."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def from_name(cls, name: str) -> "Weekday":
        """Resolve a full or three-letter weekday name, case-insensitively."""
        key = name.strip().lower().rstrip(".")
        if len(key) >= 3:
            for member in cls:
                if member.name.lower().startswith(key):
                    return member
        raise ValueError(f"Unknown weekday name: {name!r}")

    @property
    def label(self) -> str:
        return self.name.capitalize()


WEEKEND_DAYS = frozenset({Weekday.SATURDAY, Weekday.SUNDAY})
WORKING_DAYS = frozenset(
    {Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY, Weekday.THURSDAY, Weekday.FRIDAY}
)


@dataclass(frozen=True)
class ParseContext:
    """Anchor for resolving relative expressions such as "tomorrow"."""

    reference_date: date


class ParsedDateRange(BaseModel):
    """An inclusive span of dates, optionally restricted to some weekdays.

    This is also the ``dateRanges`` element of the LLM response contract, so
    the wire names are camelCase and unknown keys are rejected.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    start: date
    end: date
    days_of_week: Optional[frozenset[Weekday]] = Field(default=None, alias="daysOfWeek")
    times: Optional[tuple[str, ...]] = None

    @field_validator("start", "end", mode="before")
    @classmethod
    def require_iso_string(cls, value: Any) -> Any:
        if isinstance(value, date):
            return value
        if not isinstance(value, str):
            raise ValueError("dates must be ISO-8601 strings")
        return date.fromisoformat(value.strip())

    @field_validator("days_of_week", mode="before")
    @classmethod
    def coerce_weekday_names(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, (str, bytes)) or not hasattr(value, "__iter__"):
            raise ValueError("daysOfWeek must be a list of weekday names")
        days = set()
        for item in value:
            if isinstance(item, Weekday):
                days.add(item)
            elif isinstance(item, str):
                days.add(Weekday.from_name(item))
            else:
                raise ValueError(f"Invalid weekday: {item!r}")
        if not days:
            raise ValueError("daysOfWeek must not be empty")
        return frozenset(days)

    @field_validator("times")
    @classmethod
    def check_times(cls, value: Optional[tuple[str, ...]]) -> Optional[tuple[str, ...]]:
        if value is None:
            return None
        for item in value:
            if not TIME_OF_DAY_RE.match(item):
                raise ValueError(f"Invalid time of day: {item!r}")
        return value

    @model_validator(mode="after")
    def check_order(self) -> "ParsedDateRange":
        if self.start > self.end:
            raise ValueError("range start must not be after its end")
        return self

    @classmethod
    def single(cls, value: date, times: Optional[List[str]] = None) -> "ParsedDateRange":
        """A range covering exactly one day."""
        return cls(start=value, end=value, times=tuple(times) if times else None)


class LLMParseResult(BaseModel):
    """Structured answer expected from the text-generation service."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    title: str
    confidence: float = Field(ge=0.0, le=1.0)
    date_ranges: List[ParsedDateRange] = Field(alias="dateRanges")

    @field_validator("confidence", mode="before")
    @classmethod
    def require_number(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("confidence must be a number")
        return value


@dataclass
class CanonicalParseResult:
    """The shape every caller ultimately receives."""

    title: str
    dates: list[date] = field(default_factory=list)
    times: list[str] = field(default_factory=list)

    @classmethod
    def empty(cls, title: str) -> "CanonicalParseResult":
        """Explicit "could not parse" outcome."""
        return cls(title=title, dates=[], times=[])

    @property
    def iso_dates(self) -> list[str]:
        return [value.isoformat() for value in self.dates]

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "dates": self.iso_dates, "times": list(self.times)}
