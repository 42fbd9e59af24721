"""Offline grammar that turns event descriptions into candidate dates.

Matching is tiered and the first tier that yields anything wins:

1. explicit dates ("Jan 10, 17, 24", "2025-01-10", "1/10/2025")
2. weekdays with a scope ("Fridays in January", "every Monday in Q1 2025")
3. relative anchors ("tomorrow", "this weekend", "next Friday")
4. ranges ("this Friday through next Wednesday", "Jan 10-14")

Times are scanned independently and attached to every date produced.
Nothing here looks at the clock: every relative expression is resolved
against :attr:`ParseContext.reference_date`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, List, Optional, Sequence

import structlog
from dateutil.relativedelta import relativedelta

from .expansion import to_canonical
from .models import (
    WEEKEND_DAYS,
    WORKING_DAYS,
    CanonicalParseResult,
    ParseContext,
    ParsedDateRange,
    Weekday,
)
from .utils import month_end, month_start, preview, quarter_bounds, safe_date

LOGGER = structlog.get_logger(__name__)

DEFAULT_EVERY_WINDOW_WEEKS = 12
MAX_NEXT_DAYS = 30

MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

FULL_WEEKDAYS = frozenset(member.name.lower() for member in Weekday)
PLURAL_WEEKDAYS = frozenset(name + "s" for name in FULL_WEEKDAYS)

NUMBER_WORDS = {
    "a": 1,
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
    "eleven": 11,
    "twelve": 12,
}

_ORDINAL = r"(?:st|nd|rd|th)?"
_DAY_NUMBER = r"(?:3[01]|[12]\d|0?[1-9])"
# A day of month, but never the hour of a time such as "7pm" or "10:30".
_DAY = _DAY_NUMBER + _ORDINAL + r"\b(?!\s*(?::\d|[ap]\.?m\b))"
_YEAR = r"(?:19|20)\d{2}"
_MONTH = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\b\.?"
)
_WEEKDAY = (
    r"(?:monday|tuesday|wednesday|thursday|friday|saturday|sunday"
    r"|mon|tues|tue|wed|thurs|thur|thu|fri|sat|sun)\b\.?"
)
_WEEKDAY_PLURAL = r"(?:mondays|tuesdays|wednesdays|thursdays|fridays|saturdays|sundays)\b"
_LIST_JOIN = r"(?:\s*,\s*(?:and\s+|or\s+|&\s*)?|\s+(?:and|or)\s+|\s*&\s*)"

ISO_DATE_RE = re.compile(r"\b(?P<year>\d{4})-(?P<month>\d{1,2})-(?P<day>\d{1,2})\b")
NUMERIC_DATE_RE = re.compile(
    r"(?<![\d/])(?P<month>1[0-2]|0?[1-9])/(?P<day>3[01]|[12]\d|0?[1-9])(?:/(?P<year>\d{4}))?(?![\d/])"
)
MONTH_DAY_RE = re.compile(r"\b(?P<month>" + _MONTH + r")\s+(?P<day>" + _DAY + ")", re.IGNORECASE)
DAY_MONTH_RE = re.compile(
    r"\b(?P<day>" + _DAY_NUMBER + _ORDINAL + r")\s+(?:of\s+)?(?P<month>" + _MONTH + ")",
    re.IGNORECASE,
)
YEAR_TAIL_RE = re.compile(r",?\s*(?P<year>" + _YEAR + r")\b")
LIST_CONTINUATION_RE = re.compile(
    _LIST_JOIN + r"(?:(?P<month>" + _MONTH + r")\s+)?(?P<day>" + _DAY + ")", re.IGNORECASE
)
# What may follow a bare day in a list, so "Jan 10 and 2 friends" stays one date.
LIST_ITEM_END_RE = re.compile(
    r"\s*(?:$|[,;.!?)&@/\-–—]|\d|(?:and|or|at|from|to|till|until|through|thru|in|on|noon|midday|midnight)\b|"
    + _MONTH
    + "|"
    + _WEEKDAY
    + ")",
    re.IGNORECASE,
)
BARE_DAY_RE = re.compile(r"(?P<day>" + _DAY_NUMBER + ")" + _ORDINAL, re.IGNORECASE)

QUARTER_RE = re.compile(r"\bQ(?P<quarter>[1-4])(?:\s*(?:of\s+)?'?(?P<year>" + _YEAR + r"))?\b", re.IGNORECASE)
MONTH_SCOPE_RE = re.compile(
    r"\b(?P<prep>(?:in|during|throughout|for|of)\s+)?(?P<month>" + _MONTH + r")(?:\s+(?P<year>" + _YEAR + r")\b)?",
    re.IGNORECASE,
)
PERIOD_SCOPE_RE = re.compile(
    r"\b(?:(?:for|over|during)\s+)?(?:the\s+)?(?:next|coming)\s+"
    r"(?P<count>\d{1,2}|" + "|".join(NUMBER_WORDS) + r")\s+(?P<unit>weeks?|months?)\b",
    re.IGNORECASE,
)
CALENDAR_SCOPE_RE = re.compile(r"\b(?P<which>this|next)\s+(?P<unit>week|month)\b", re.IGNORECASE)
EVERY_RE = re.compile(r"\b(?:every|each|weekly)\b", re.IGNORECASE)
DAY_KIND_RE = re.compile(
    r"\b(?P<every>(?:every|each)\s+)?(?P<kind>"
    + _WEEKDAY_PLURAL
    + r"|weekends\b|weekdays\b|weekend\b|weekday\b|day\b|"
    + _WEEKDAY
    + ")",
    re.IGNORECASE,
)
WEEKDAY_TOKEN_RE = re.compile(_WEEKDAY, re.IGNORECASE)
WEEKDAY_LIST_RE = re.compile(
    r"\b(?:(?P<modifier>next|this|coming|on)\s+)?(?P<days>" + _WEEKDAY + "(?:" + _LIST_JOIN + _WEEKDAY + ")*)",
    re.IGNORECASE,
)
RELATIVE_PATTERNS = (
    ("day_after_tomorrow", re.compile(r"\b(?:the\s+)?day\s+after\s+tomorrow\b", re.IGNORECASE)),
    ("today", re.compile(r"\b(?:today|tonight)\b", re.IGNORECASE)),
    ("tomorrow", re.compile(r"\btomorrow\b", re.IGNORECASE)),
    ("next_weekend", re.compile(r"\bnext\s+weekend\b", re.IGNORECASE)),
    ("this_weekend", re.compile(r"\b(?:this\s+)?weekend\b", re.IGNORECASE)),
    ("next_week", re.compile(r"\bnext\s+week\b", re.IGNORECASE)),
    ("next_days", re.compile(r"\b(?:the\s+)?next\s+(?P<count>\d{1,2})\s+days?\b", re.IGNORECASE)),
    ("weekdays", WEEKDAY_LIST_RE),
)

_ANCHOR = "|".join(
    [
        r"\d{4}-\d{1,2}-\d{1,2}\b",
        r"(?<![\d/])(?:1[0-2]|0?[1-9])/(?:3[01]|[12]\d|0?[1-9])(?:/\d{4})?(?![\d/])",
        _MONTH + r"\s+" + _DAY + r"(?:,?\s*" + _YEAR + r"\b)?",
        _DAY_NUMBER + _ORDINAL + r"\s+(?:of\s+)?" + _MONTH + r"(?:,?\s*" + _YEAR + r"\b)?",
        r"today\b|tonight\b|tomorrow\b",
        r"(?:(?:next|this|coming)\s+)?" + _WEEKDAY,
    ]
)
RANGE_RE = re.compile(
    r"\b(?P<lead>(?:from|between)\s+)?(?P<start>" + _ANCHOR + r")"
    r"(?:\s+(?:through|thru|until|till|to)\s+|\s*[-–—]\s*)"
    r"(?P<end>" + _ANCHOR + "|" + _DAY + ")",
    re.IGNORECASE,
)
MODIFIED_WEEKDAY_RE = re.compile(r"(?:(?P<modifier>next|this|coming)\s+)?(?P<day>" + _WEEKDAY + ")", re.IGNORECASE)

TIME_RE = re.compile(
    r"\b(?:(?P<hour>1[0-2]|0?[1-9])(?::(?P<minute>[0-5]\d))?\s*(?P<meridiem>[ap])\.?m\b\.?"
    r"|(?P<hour24>[01]?\d|2[0-3]):(?P<minute24>[0-5]\d)\b"
    r"|(?P<noon>noon|midday)\b"
    r"|(?P<midnight>midnight)\b)",
    re.IGNORECASE,
)
TITLE_TAIL_RE = re.compile(
    r"(?:[\s,;:(\-–—]+|\b(?:on|at|in|from|for|every|each|during|starting|between|by|the)\b)+$",
    re.IGNORECASE,
)

Span = tuple[int, int]


@dataclass(frozen=True)
class TierMatch:
    """Ranges found by one grammar tier plus where its first token starts."""

    tier: str
    ranges: List[ParsedDateRange]
    anchor: int


@dataclass(frozen=True)
class RangeClause:
    """An "<anchor> through <anchor>" clause found in the text."""

    span: Span
    start: date
    end: date


@dataclass(frozen=True)
class _Anchor:
    value: date
    kind: str  # "dated", "undated", "weekday" or "relative"


@dataclass
class _Scan:
    text: str
    reference: date
    every_window_weeks: int
    ranges: List[RangeClause] = field(default_factory=list)
    blocked: List[Span] = field(default_factory=list)


def parse_event_description(
    text: str,
    context: ParseContext,
    *,
    every_window_weeks: int = DEFAULT_EVERY_WINDOW_WEEKS,
) -> CanonicalParseResult:
    """Parse ``text`` with the offline grammar.

    Returns a result with no dates when nothing is recognised; the title is
    then the whole input.
    """
    source = text.strip()
    times, time_spans = extract_times(source)

    scan = _Scan(text=source, reference=context.reference_date, every_window_weeks=every_window_weeks)
    scan.ranges = find_range_clauses(source, context.reference_date)
    scan.blocked = [clause.span for clause in scan.ranges] + time_spans

    match: Optional[TierMatch] = None
    for tier in TIERS:
        match = tier(scan)
        if match is not None:
            break

    if match is None:
        LOGGER.debug("parser.no_match", length=len(source), preview=preview(source))
        return CanonicalParseResult.empty(source)

    anchors = [match.anchor] + [start for start, _ in time_spans] + [clause.span[0] for clause in scan.ranges]
    title = extract_title(source, min(anchors))
    found = list(match.ranges)
    # Single-day tiers never see range text, so its ranges are added here.
    if match.tier in ("explicit", "relative"):
        found += _clause_ranges(scan)
    ranges = [
        date_range.model_copy(update={"times": tuple(times) if times else None})
        for date_range in found
    ]
    result = to_canonical(title, ranges)
    LOGGER.debug(
        "parser.tier.matched",
        tier=match.tier,
        ranges=len(ranges),
        dates=len(result.dates),
        times=len(result.times),
    )
    return result


def parse_dates(text: str, context: ParseContext) -> List[str]:
    """ISO dates recognised in ``text`` by the offline grammar."""
    return parse_event_description(text, context).iso_dates


def extract_times(text: str) -> tuple[List[str], List[Span]]:
    """All times of day in ``text`` as deduplicated "HH:MM" strings, plus their spans."""
    times: List[str] = []
    spans: List[Span] = []
    for match in TIME_RE.finditer(text):
        if match.group("meridiem"):
            hour = int(match.group("hour")) % 12
            if match.group("meridiem").lower() == "p":
                hour += 12
            minute = int(match.group("minute") or 0)
        elif match.group("hour24"):
            hour, minute = int(match.group("hour24")), int(match.group("minute24"))
        elif match.group("noon"):
            hour, minute = 12, 0
        else:
            hour, minute = 0, 0
        value = f"{hour:02d}:{minute:02d}"
        spans.append(match.span())
        if value not in times:
            times.append(value)
    return times, spans


def extract_title(text: str, anchor: int) -> str:
    """The text before ``anchor`` minus trailing separators, or all of ``text``."""
    title = TITLE_TAIL_RE.sub("", text[:anchor]).strip()
    return title or text.strip()


def find_range_clauses(text: str, reference: date) -> List[RangeClause]:
    """Every resolvable "<anchor> through <anchor>" clause, left to right."""
    clauses: List[RangeClause] = []
    position = 0
    while True:
        match = RANGE_RE.search(text, position)
        if match is None:
            return clauses
        clause = _resolve_range(match, reference)
        if clause is None:
            position = match.start() + 1
            continue
        clauses.append(clause)
        position = match.end()


def _resolve_range(match: re.Match, reference: date) -> Optional[RangeClause]:
    start = _resolve_anchor(match.group("start"), reference)
    if start is None:
        return None

    end_text = match.group("end")
    bare = BARE_DAY_RE.fullmatch(end_text.strip())
    if bare:
        if start.kind not in ("dated", "undated"):
            return None
        end_value = safe_date(start.value.year, start.value.month, int(bare.group("day")))
        if end_value is not None and end_value < start.value:
            following = start.value + relativedelta(months=1)
            end_value = safe_date(following.year, following.month, int(bare.group("day")))
        if end_value is None:
            return None
        end = _Anchor(end_value, start.kind)
    else:
        end = _resolve_anchor(end_text, reference)
        if end is None:
            return None

    end_value = end.value
    if end_value < start.value:
        if end.kind == "weekday":
            end_value += timedelta(weeks=((start.value - end_value).days + 6) // 7)
        elif end.kind == "undated":
            end_value = safe_date(start.value.year, end_value.month, end_value.day)
            if end_value is not None and end_value < start.value:
                end_value = safe_date(start.value.year + 1, end_value.month, end_value.day)
            if end_value is None:
                return None
        else:
            return None

    return RangeClause(span=match.span(), start=start.value, end=end_value)


def _resolve_anchor(fragment: str, reference: date) -> Optional[_Anchor]:
    fragment = fragment.strip()
    lowered = fragment.lower()

    if lowered in ("today", "tonight"):
        return _Anchor(reference, "relative")
    if lowered == "tomorrow":
        return _Anchor(reference + timedelta(days=1), "relative")

    iso = ISO_DATE_RE.fullmatch(fragment)
    if iso:
        value = safe_date(int(iso.group("year")), int(iso.group("month")), int(iso.group("day")))
        return _Anchor(value, "dated") if value else None

    numeric = NUMERIC_DATE_RE.fullmatch(fragment)
    if numeric:
        return _dated_anchor(int(numeric.group("month")), int(numeric.group("day")), numeric.group("year"), reference)

    for pattern in (MONTH_DAY_RE, DAY_MONTH_RE):
        named = pattern.match(fragment)
        if named:
            year_match = YEAR_TAIL_RE.fullmatch(fragment[named.end():])
            year = year_match.group("year") if year_match else None
            if not year_match and fragment[named.end():].strip():
                continue
            return _dated_anchor(_month_number(named.group("month")), _day_number(named.group("day")), year, reference)

    weekday = MODIFIED_WEEKDAY_RE.fullmatch(fragment)
    if weekday and is_weekday_token(weekday.group("day")):
        modifier = (weekday.group("modifier") or "").lower()
        value = upcoming_weekday(
            reference,
            Weekday.from_name(weekday.group("day")),
            strictly_after=modifier == "next",
        )
        return _Anchor(value, "weekday")
    return None


def _dated_anchor(month: int, day: int, year: Optional[str], reference: date) -> Optional[_Anchor]:
    if year:
        value = safe_date(int(year), month, day)
        return _Anchor(value, "dated") if value else None
    resolved_year = infer_year(month, day, reference)
    if resolved_year is None:
        return None
    return _Anchor(date(resolved_year, month, day), "undated")


def _match_explicit_dates(scan: _Scan) -> Optional[TierMatch]:
    claimed: List[Span] = list(scan.blocked)
    found: List[tuple[int, List[date]]] = []

    for match in MONTH_DAY_RE.finditer(scan.text):
        if _overlaps(match.span(), claimed):
            continue
        end, dates = _read_month_day_list(scan.text, match, scan.reference)
        claimed.append((match.start(), end))
        found.append((match.start(), dates))

    for match in DAY_MONTH_RE.finditer(scan.text):
        if _overlaps(match.span(), claimed):
            continue
        end = match.end()
        year_match = YEAR_TAIL_RE.match(scan.text, end)
        year = year_match.group("year") if year_match else None
        if year_match:
            end = year_match.end()
        anchor = _dated_anchor(_month_number(match.group("month")), _day_number(match.group("day")), year, scan.reference)
        claimed.append((match.start(), end))
        if anchor is not None:
            found.append((match.start(), [anchor.value]))

    for pattern in (ISO_DATE_RE, NUMERIC_DATE_RE):
        for match in pattern.finditer(scan.text):
            if _overlaps(match.span(), claimed):
                continue
            claimed.append(match.span())
            if pattern is ISO_DATE_RE:
                value = safe_date(int(match.group("year")), int(match.group("month")), int(match.group("day")))
                anchor = _Anchor(value, "dated") if value else None
            else:
                anchor = _dated_anchor(int(match.group("month")), int(match.group("day")), match.group("year"), scan.reference)
            if anchor is not None:
                found.append((match.start(), [anchor.value]))

    dates = [value for _, values in found for value in values]
    if not dates:
        return None
    return TierMatch(
        tier="explicit",
        ranges=[ParsedDateRange.single(value) for value in dates],
        anchor=min(start for start, _ in found),
    )


def _read_month_day_list(text: str, match: re.Match, reference: date) -> tuple[int, List[date]]:
    """Read "Jan 10, 17 and Feb 2, 2025" starting at ``match``.

    Days without a month reuse the previous month. A year anywhere in the
    list applies to the whole list; otherwise the year is inferred from the
    first item and bumped whenever the month wraps around.
    """
    items = [(_month_number(match.group("month")), _day_number(match.group("day")))]
    explicit_year: Optional[int] = None
    position = match.end()
    while True:
        year_match = YEAR_TAIL_RE.match(text, position)
        if year_match:
            explicit_year = explicit_year or int(year_match.group("year"))
            position = year_match.end()
        continuation = LIST_CONTINUATION_RE.match(text, position)
        if continuation is None:
            break
        month = continuation.group("month")
        day = _day_number(continuation.group("day"))
        if month is None and (day <= items[-1][1] or not LIST_ITEM_END_RE.match(text, continuation.end())):
            break
        items.append((_month_number(month) if month else items[-1][0], day))
        position = continuation.end()

    first_month, first_day = items[0]
    year = explicit_year or infer_year(first_month, first_day, reference) or reference.year
    dates: List[date] = []
    previous_month = first_month
    for month, day in items:
        if explicit_year is None and month < previous_month:
            year += 1
        previous_month = month
        value = safe_date(year, month, day)
        if value is not None:
            dates.append(value)
    return position, dates


def _match_weekday_qualifier(scan: _Scan) -> Optional[TierMatch]:
    named: set[Weekday] = set()
    every_day = False
    recurring = bool(_unblocked(EVERY_RE, scan))
    starts: List[int] = []

    for match in _unblocked(DAY_KIND_RE, scan):
        kind = match.group("kind").lower().rstrip(".")
        has_every = bool(match.group("every"))
        if kind in ("weekends", "weekdays"):
            named |= WEEKEND_DAYS if kind == "weekends" else WORKING_DAYS
            recurring = True
        elif kind in ("weekend", "weekday"):
            if not has_every:
                continue
            named |= WEEKEND_DAYS if kind == "weekend" else WORKING_DAYS
        elif kind == "day":
            if not has_every:
                continue
            every_day = True
        elif kind in PLURAL_WEEKDAYS:
            named.add(Weekday.from_name(kind[:-1]))
            recurring = True
        elif is_weekday_token(match.group("kind")):
            named.add(Weekday.from_name(kind))
        else:
            continue
        starts.append(match.start())

    if not starts:
        return None

    scopes = _scopes(scan)
    if not scopes:
        if not recurring:
            return None
        scopes = [(scan.reference, scan.reference + timedelta(weeks=scan.every_window_weeks))]

    # Named days win over "every day"; alone it means no weekday restriction.
    days_of_week = frozenset(named) if named else None
    if not named and not every_day:
        return None
    ranges = [ParsedDateRange(start=start, end=end, days_of_week=days_of_week) for start, end in scopes]
    return TierMatch(tier="weekday", ranges=ranges, anchor=min(starts))


def _scopes(scan: _Scan) -> List[tuple[date, date]]:
    """Date spans that a weekday qualifier is restricted to."""
    reference = scan.reference
    scopes: List[tuple[int, date, date]] = []

    for match in _unblocked(QUARTER_RE, scan):
        quarter = int(match.group("quarter"))
        if match.group("year"):
            first, last = quarter_bounds(int(match.group("year")), quarter)
        else:
            first, last = quarter_bounds(reference.year, quarter)
            if last < reference:
                first, last = quarter_bounds(reference.year + 1, quarter)
        scopes.append((match.start(), first, last))

    for match in _unblocked(MONTH_SCOPE_RE, scan):
        token = match.group("month")
        if MONTH_DAY_RE.match(scan.text, match.start("month")):
            continue
        # "may" is usually the verb unless it reads like a month name.
        if token.lower() == "may" and not (match.group("prep") or match.group("year") or token[0].isupper()):
            continue
        month = _month_number(token)
        if match.group("year"):
            year = int(match.group("year"))
        else:
            year = reference.year if month_end(reference.year, month) >= reference else reference.year + 1
        scopes.append((match.start(), month_start(year, month), month_end(year, month)))

    for match in _unblocked(PERIOD_SCOPE_RE, scan):
        count_text = match.group("count").lower()
        count = int(count_text) if count_text.isdigit() else NUMBER_WORDS[count_text]
        if count < 1:
            continue
        if match.group("unit").lower().startswith("week"):
            end = reference + timedelta(weeks=count)
        else:
            end = reference + relativedelta(months=count)
        scopes.append((match.start(), reference, end))

    for match in _unblocked(CALENDAR_SCOPE_RE, scan):
        which, unit = match.group("which").lower(), match.group("unit").lower()
        if unit == "week":
            monday = reference - timedelta(days=reference.weekday())
            if which == "next":
                monday += timedelta(weeks=1)
            scopes.append((match.start(), max(monday, reference), monday + timedelta(days=6)))
        else:
            anchor = reference + relativedelta(months=1) if which == "next" else reference
            first = month_start(anchor.year, anchor.month)
            scopes.append((match.start(), max(first, reference), month_end(anchor.year, anchor.month)))

    for clause in scan.ranges:
        scopes.append((clause.span[0], clause.start, clause.end))

    scopes.sort(key=lambda item: item[0])
    return [(first, last) for _, first, last in scopes]


def _match_relative_anchor(scan: _Scan) -> Optional[TierMatch]:
    reference = scan.reference
    candidates: List[tuple[int, int, str, re.Match]] = []
    for name, pattern in RELATIVE_PATTERNS:
        for match in _unblocked(pattern, scan):
            candidates.append((match.start(), match.end(), name, match))
    candidates.sort(key=lambda item: (item[0], item[0] - item[1]))

    claimed: List[Span] = []
    found: List[tuple[int, List[date]]] = []
    for start, end, name, match in candidates:
        if _overlaps((start, end), claimed):
            continue
        dates = _resolve_relative(name, match, reference)
        if not dates:
            continue
        claimed.append((start, end))
        found.append((start, dates))

    if not found:
        return None
    dates = [value for _, values in found for value in values]
    return TierMatch(
        tier="relative",
        ranges=[ParsedDateRange.single(value) for value in dates],
        anchor=min(start for start, _ in found),
    )


def _resolve_relative(name: str, match: re.Match, reference: date) -> List[date]:
    if name == "today":
        return [reference]
    if name == "tomorrow":
        return [reference + timedelta(days=1)]
    if name == "day_after_tomorrow":
        return [reference + timedelta(days=2)]
    if name in ("this_weekend", "next_weekend"):
        saturday = reference + timedelta(days=(Weekday.SATURDAY - reference.weekday()) % 7)
        if name == "next_weekend":
            saturday += timedelta(weeks=1)
        return [saturday, saturday + timedelta(days=1)]
    if name == "next_week":
        monday = reference + timedelta(days=(Weekday.MONDAY - reference.weekday()) % 7 or 7)
        return [monday + timedelta(days=offset) for offset in range(7)]
    if name == "next_days":
        count = int(match.group("count"))
        if not 1 <= count <= MAX_NEXT_DAYS:
            return []
        return [reference + timedelta(days=offset) for offset in range(1, count + 1)]

    modifier = (match.group("modifier") or "").lower()
    dates: List[date] = []
    for token in WEEKDAY_TOKEN_RE.finditer(match.group("days")):
        if not is_weekday_token(token.group(0)):
            continue
        value = upcoming_weekday(reference, Weekday.from_name(token.group(0)), strictly_after=modifier == "next")
        if value not in dates:
            dates.append(value)
    return dates


def _match_range(scan: _Scan) -> Optional[TierMatch]:
    if not scan.ranges:
        return None
    return TierMatch(
        tier="range",
        ranges=_clause_ranges(scan),
        anchor=scan.ranges[0].span[0],
    )


def _clause_ranges(scan: _Scan) -> List[ParsedDateRange]:
    return [ParsedDateRange(start=clause.start, end=clause.end) for clause in scan.ranges]


TIERS: Sequence[Callable[[_Scan], Optional[TierMatch]]] = (
    _match_explicit_dates,
    _match_weekday_qualifier,
    _match_relative_anchor,
    _match_range,
)


def upcoming_weekday(reference: date, weekday: Weekday, *, strictly_after: bool) -> date:
    """The next ``weekday`` on or after ``reference`` (strictly after if asked)."""
    delta = (weekday - reference.weekday()) % 7
    if strictly_after and delta == 0:
        delta = 7
    return reference + timedelta(days=delta)


def infer_year(month: int, day: int, reference: date) -> Optional[int]:
    """Year of the first ``month``/``day`` on or after ``reference``."""
    for year in range(reference.year, reference.year + 9):
        value = safe_date(year, month, day)
        if value is not None and value >= reference:
            return year
    return None


def is_weekday_token(token: str) -> bool:
    """Accept full weekday names in any case but abbreviations only when capitalised.

    Lower-case "sat", "sun" or "wed" are far more often ordinary words.
    """
    stripped = token.strip().rstrip(".")
    lowered = stripped.lower()
    if lowered in FULL_WEEKDAYS or lowered in PLURAL_WEEKDAYS:
        return True
    return stripped[:1].isupper()


def _unblocked(pattern: re.Pattern, scan: _Scan) -> List[re.Match]:
    return [match for match in pattern.finditer(scan.text) if not _overlaps(match.span(), scan.blocked)]


def _overlaps(span: Span, spans: Sequence[Span]) -> bool:
    start, end = span
    return any(start < other_end and other_start < end for other_start, other_end in spans)


def _month_number(token: str) -> int:
    return MONTHS[token.strip().rstrip(".").lower()[:3]]


def _day_number(token: str) -> int:
    return int(re.match(r"\d+", token).group(0))
