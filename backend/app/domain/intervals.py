# backend/app/domain/intervals.py
"""
Calendar-day arithmetic used by revenue recognition.

Everything here works on `datetime.date` values in UTC. Timestamps are
truncated to their UTC calendar day before any comparison, so a payment
stored as 23:30+05:30 and one stored as 18:00Z land on the same day.

All functions are total: bad ranges give 0 days or `None`, never an exception.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

DateLike = Union[date, datetime]

ONE_DAY = timedelta(days=1)

# Added before flooring so values such as 10.005 (stored as 10.00499...)
# round up the way a person reading the number expects.
_ROUNDING_EPSILON = 1e-7


def to_calendar_day(value: DateLike) -> date:
    """Truncate a date/datetime to its UTC calendar day. Naive datetimes are treated as UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return date(value.year, value.month, value.day)
    return date(value.year, value.month, value.day)


def inclusive_day_count(start: DateLike, end: DateLike) -> int:
    s = to_calendar_day(start)
    e = to_calendar_day(end)
    if s > e:
        return 0
    return (e - s).days + 1


@dataclass(frozen=True)
class DateSpan:
    """Closed interval of calendar days, [start, end]."""

    start: date
    end: date

    @classmethod
    def of(cls, start: DateLike, end: DateLike) -> "DateSpan":
        return cls(start=to_calendar_day(start), end=to_calendar_day(end))

    @property
    def days(self) -> int:
        return inclusive_day_count(self.start, self.end)

    @property
    def is_empty(self) -> bool:
        return self.start > self.end


def intersect(a: DateSpan, b: DateSpan) -> Optional[DateSpan]:
    start = max(a.start, b.start)
    end = min(a.end, b.end)
    if start > end:
        return None
    return DateSpan(start=start, end=end)


def round_money(n: float) -> float:
    """Round to cents, half away from zero."""
    if not n or math.isnan(n):
        return 0.0
    sign = -1.0 if n < 0 else 1.0
    cents = math.floor(abs(n) * 100 + 0.5 + _ROUNDING_EPSILON)
    return sign * cents / 100


# -----------------------------
# Reporting windows
# -----------------------------
@dataclass(frozen=True)
class MonthWindow:
    """Half-open reporting window [month_start, month_end)."""

    month_start: datetime
    month_end: datetime

    @property
    def first_day(self) -> date:
        return to_calendar_day(self.month_start)

    @property
    def last_day(self) -> date:
        # month_end is exclusive; step back one calendar day
        return to_calendar_day(self.month_end) - ONE_DAY

    @property
    def span(self) -> DateSpan:
        return DateSpan(start=self.first_day, end=self.last_day)

    @property
    def days(self) -> int:
        return inclusive_day_count(self.first_day, self.last_day)


def _first_of_next_month(d: date) -> date:
    if d.month == 12:
        return date(d.year + 1, 1, 1)
    return date(d.year, d.month + 1, 1)


def _midnight(d: date) -> datetime:
    return datetime(d.year, d.month, d.day)


def month_window_for(now: Optional[datetime] = None) -> MonthWindow:
    """Window covering the calendar month that contains `now` (UTC)."""
    today = to_calendar_day(now or datetime.now(timezone.utc))
    first = date(today.year, today.month, 1)
    return MonthWindow(month_start=_midnight(first), month_end=_midnight(_first_of_next_month(first)))


def month_window_from_label(yyyy_mm: str) -> MonthWindow:
    """
    "2026-02" -> [2026-02-01, 2026-03-01).
    Raises ValueError for anything that is not a real year-month.
    """
    parts = (yyyy_mm or "").strip().split("-")
    if len(parts) != 2:
        raise ValueError(f"invalid month label: {yyyy_mm!r} (expected YYYY-MM)")
    try:
        y, m = int(parts[0]), int(parts[1])
    except ValueError:
        raise ValueError(f"invalid month label: {yyyy_mm!r} (expected YYYY-MM)")
    if not 1 <= m <= 12:
        raise ValueError(f"invalid month in label: {yyyy_mm!r}")
    try:
        first = date(y, m, 1)
        end = _first_of_next_month(first)
    except (OverflowError, ValueError):
        raise ValueError(f"month out of range: {yyyy_mm!r}")
    return MonthWindow(month_start=_midnight(first), month_end=_midnight(end))


def as_naive_utc(value: DateLike) -> datetime:
    """Aware datetimes -> naive UTC; naive ones pass through; dates -> midnight. Matches the DateTime columns."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    return _midnight(value)
