# backend/tests/test_intervals.py
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from app.domain.intervals import (
    DateSpan,
    MonthWindow,
    as_naive_utc,
    inclusive_day_count,
    intersect,
    month_window_for,
    month_window_from_label,
    round_money,
    to_calendar_day,
)

IST = timezone(timedelta(hours=5, minutes=30))


@pytest.mark.parametrize(
    "value",
    [
        date(2026, 3, 15),
        datetime(2026, 3, 15, 23, 59, 59, 999999),
        datetime(2026, 3, 15, 2, 0, tzinfo=IST),
        datetime(2026, 3, 15, 22, 0, tzinfo=timezone(timedelta(hours=-8))),
    ],
)
def test_to_calendar_day_is_idempotent(value):
    once = to_calendar_day(value)
    assert to_calendar_day(once) == once
    assert type(once) is date


def test_to_calendar_day_uses_utc_for_aware_timestamps():
    # 02:00 IST on the 15th is 20:30 UTC on the 14th
    assert to_calendar_day(datetime(2026, 3, 15, 2, 0, tzinfo=IST)) == date(2026, 3, 14)
    # 22:00 PST on the 15th is 06:00 UTC on the 16th
    assert to_calendar_day(datetime(2026, 3, 15, 22, 0, tzinfo=timezone(timedelta(hours=-8)))) == date(2026, 3, 16)
    assert to_calendar_day(datetime(2026, 3, 15, 23, 59)) == date(2026, 3, 15)


def test_inclusive_day_count():
    assert inclusive_day_count(date(2026, 3, 1), date(2026, 3, 31)) == 31
    assert inclusive_day_count(date(2026, 3, 5), date(2026, 3, 5)) == 1
    assert inclusive_day_count(datetime(2026, 3, 1, 18), datetime(2026, 3, 2, 1)) == 2
    assert inclusive_day_count(date(2024, 2, 1), date(2024, 2, 29)) == 29


def test_inclusive_day_count_reversed_range_is_zero():
    assert inclusive_day_count(date(2026, 3, 10), date(2026, 3, 9)) == 0


def test_intersect_overlapping_and_disjoint():
    a = DateSpan.of(date(2026, 3, 1), date(2026, 3, 31))
    b = DateSpan.of(date(2026, 3, 22), date(2026, 4, 20))
    assert intersect(a, b) == DateSpan(date(2026, 3, 22), date(2026, 3, 31))
    assert intersect(a, b).days == 10

    c = DateSpan.of(date(2026, 4, 1), date(2026, 4, 30))
    assert intersect(a, c) is None


def test_intersect_single_shared_day():
    a = DateSpan.of(date(2026, 3, 1), date(2026, 3, 10))
    b = DateSpan.of(date(2026, 3, 10), date(2026, 3, 20))
    assert intersect(a, b) == DateSpan(date(2026, 3, 10), date(2026, 3, 10))


def test_round_money():
    assert round_money(10.005) == 10.01
    assert round_money(0) == 0
    assert round_money(1.004) == 1.0
    assert round_money(2.675) == 2.68
    assert round_money(-10.005) == -10.01
    assert round_money(9300 * 10 / 31) == 3000.0
    assert round_money(float("nan")) == 0


def test_month_window_from_label():
    w = month_window_from_label("2024-02")
    assert w.month_start == datetime(2024, 2, 1)
    assert w.month_end == datetime(2024, 3, 1)
    assert w.days == 29
    assert w.last_day == date(2024, 2, 29)

    dec = month_window_from_label("2026-12")
    assert dec.month_end == datetime(2027, 1, 1)
    assert dec.days == 31


@pytest.mark.parametrize("bad", ["", "2026", "2026-13", "2026-00", "march", "2026-03-01", "9999-12", "0000-01"])
def test_month_window_from_label_rejects_garbage(bad):
    with pytest.raises(ValueError):
        month_window_from_label(bad)


def test_month_window_for_now():
    w = month_window_for(datetime(2026, 10, 19, 15, 30, tzinfo=timezone.utc))
    assert w == MonthWindow(datetime(2026, 10, 1), datetime(2026, 11, 1))


def test_empty_window_has_no_days():
    w = MonthWindow(datetime(2026, 3, 1), datetime(2026, 3, 1))
    assert w.days == 0
    assert w.span.is_empty


def test_as_naive_utc():
    assert as_naive_utc(datetime(2026, 3, 1, 5, 30, tzinfo=IST)) == datetime(2026, 3, 1, 0, 0)
    assert as_naive_utc(date(2026, 3, 1)) == datetime(2026, 3, 1)
