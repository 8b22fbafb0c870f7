"""Day, month and look-ahead availability."""

from datetime import date, timedelta

import pytest

from studiobook.core.exceptions import NotFoundException
from studiobook.core.time_utils import to_utc_instant
from studiobook.models.booking import BookingStatus
from studiobook.services.availability_service import AvailabilityService, classify_day
from studiobook.services.slot_generator import TimeSlot


@pytest.fixture
def service(db) -> AvailabilityService:
    return AvailabilityService(db)


def _slots(*flags):
    start = to_utc_instant(date(2030, 1, 1), "10:00")
    return [
        TimeSlot(start + timedelta(hours=i), start + timedelta(hours=i + 1), flag)
        for i, flag in enumerate(flags)
    ]


@pytest.mark.parametrize(
    "flags, expected",
    [
        ((True, True), "available"),
        ((True, False), "partially-booked"),
        ((False, False), "fully-booked"),
        ((), "available"),
    ],
)
def test_classify_day(flags, expected):
    day = date(2030, 1, 1)
    assert classify_day(day, day, _slots(*flags)) == expected


def test_classify_past_day():
    assert classify_day(date(2029, 12, 31), date(2030, 1, 1), _slots(True)) == "past"


def test_day_availability_marks_booked_hours(service, studio, make_booking, booking_day, now):
    make_booking(start="14:00", hours=2)

    result = service.get_day_availability(studio.id, booking_day, now=now)

    unavailable = [slot.start for slot in result["time_slots"] if not slot.available]
    assert unavailable == [
        to_utc_instant(booking_day, "14:00"),
        to_utc_instant(booking_day, "15:00"),
    ]
    assert len(result["time_slots"]) == 11


def test_month_rollup(service, studio, make_booking, booking_day, now):
    make_booking(start="10:00", hours=11)

    result = service.get_month_availability(
        studio.id, booking_day.year, booking_day.month, now=now
    )
    days = {summary.date: summary for summary in result["availability"]}

    assert result["month"] == booking_day.replace(day=1)
    booked = days[booking_day]
    assert booked.status == "fully-booked"
    assert booked.available_slots == 0
    assert booked.total_slots == 11
    assert booked.metadata["bookings"] == 1


def test_month_rollup_statuses(service, studio, make_booking, booking_day, now):
    make_booking(start="12:00", hours=1)
    make_booking(start="18:00", hours=1, status=BookingStatus.CANCELLED.value)

    result = service.get_month_availability(
        studio.id, booking_day.year, booking_day.month, now=now
    )
    days = {summary.date: summary for summary in result["availability"]}

    assert days[booking_day].status == "partially-booked"
    assert days[booking_day].available_slots == 10
    if booking_day.day > 1:
        first = booking_day.replace(day=1)
        assert days[first].status in ("past", "available")


def test_month_rollup_flags_weekends(service, studio, now):
    result = service.get_month_availability(studio.id, 2031, 1, now=now)
    days = {summary.date: summary for summary in result["availability"]}

    assert days[date(2031, 1, 4)].metadata["is_weekend"] is True
    assert days[date(2031, 1, 5)].metadata["is_weekend"] is True
    assert days[date(2031, 1, 6)].metadata["is_weekend"] is False
    assert days[date(2031, 1, 10)].metadata["is_weekend"] is False


def test_unknown_studio(service, booking_day):
    with pytest.raises(NotFoundException):
        service.get_day_availability("missing", booking_day)


def test_studio_list_summary(service, studio, make_booking, booking_day, now):
    make_booking(start="14:00", hours=2)

    rows = service.list_studios_with_availability(now=now)

    assert len(rows) == 1
    listed, summary = rows[0]
    assert listed.id == studio.id
    assert summary.total_slots > 0
    assert summary.available_slots == summary.total_slots - 2
    assert summary.is_fully_booked is False
