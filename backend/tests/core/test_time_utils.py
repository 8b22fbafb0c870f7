"""Facility clock conversions (fixed +04:00 offset, no DST)."""

from datetime import date, datetime, timezone

import pytest

from studiobook.core.time_utils import (
    as_utc,
    format_local_iso,
    is_valid_time_of_day,
    local_day_bounds,
    local_today,
    next_local_hour,
    parse_time_of_day,
    to_local_minutes,
    to_utc_instant,
)


def test_local_wall_clock_maps_to_utc_instant():
    assert to_utc_instant(date(2025, 1, 10), "14:00") == datetime(
        2025, 1, 10, 10, 0, tzinfo=timezone.utc
    )


def test_early_local_time_falls_on_previous_utc_day():
    assert to_utc_instant(date(2025, 1, 10), "02:30") == datetime(
        2025, 1, 9, 22, 30, tzinfo=timezone.utc
    )


def test_local_minutes_of_instant():
    assert to_local_minutes(datetime(2025, 1, 10, 10, 0, tzinfo=timezone.utc)) == 14 * 60
    # Naive values are UTC
    assert to_local_minutes(datetime(2025, 1, 10, 22, 15)) == 2 * 60 + 15


def test_local_minutes_with_negative_offset():
    instant = datetime(2025, 1, 10, 3, 0, tzinfo=timezone.utc)
    assert to_local_minutes(instant, offset_minutes=-300) == 22 * 60


@pytest.mark.parametrize("value, expected", [("00:00", 0), ("9:30", 570), ("23:59", 1439)])
def test_parse_time_of_day(value, expected):
    assert parse_time_of_day(value) == expected


@pytest.mark.parametrize("value", ["24:00", "12:60", "7:5", "noon", ""])
def test_parse_time_of_day_rejects_malformed(value):
    assert not is_valid_time_of_day(value)
    with pytest.raises(ValueError):
        parse_time_of_day(value)


def test_local_day_bounds_cover_one_local_day():
    start, end = local_day_bounds(date(2025, 1, 10))
    assert start == datetime(2025, 1, 9, 20, 0, tzinfo=timezone.utc)
    assert end == datetime(2025, 1, 10, 20, 0, tzinfo=timezone.utc)


def test_local_today_rolls_over_before_utc_midnight():
    now = datetime(2025, 1, 10, 21, 0, tzinfo=timezone.utc)
    assert local_today(now) == date(2025, 1, 11)


def test_next_local_hour_is_strictly_after_now():
    now = datetime(2025, 1, 10, 10, 15, tzinfo=timezone.utc)
    assert next_local_hour(now) == datetime(2025, 1, 10, 11, 0, tzinfo=timezone.utc)
    on_the_hour = datetime(2025, 1, 10, 10, 0, tzinfo=timezone.utc)
    assert next_local_hour(on_the_hour) == datetime(2025, 1, 10, 11, 0, tzinfo=timezone.utc)


def test_format_local_iso_uses_facility_offset():
    instant = datetime(2025, 1, 10, 10, 0, tzinfo=timezone.utc)
    assert format_local_iso(instant) == "2025-01-10T14:00:00+04:00"


def test_as_utc_normalizes_naive_and_aware_values():
    naive = as_utc(datetime(2025, 1, 10, 10, 0))
    assert naive.utcoffset().total_seconds() == 0
    aware = as_utc(to_utc_instant(date(2025, 1, 10), "14:00"))
    assert aware.hour == 10
