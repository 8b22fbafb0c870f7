"""Availability schemas."""

from datetime import date, datetime
from typing import List

from pydantic import Field

from .base import StandardizedModel


class TimeSlotResponse(StandardizedModel):
    start: datetime
    end: datetime
    available: bool


class DayAvailabilityResponse(StandardizedModel):
    studio_id: str
    date: date
    time_slots: List[TimeSlotResponse]


class DayMetadata(StandardizedModel):
    is_weekend: bool
    bookings: int


class DaySummaryResponse(StandardizedModel):
    date: date
    status: str = Field(..., description="past, available, partially-booked or fully-booked")
    available_slots: int
    total_slots: int
    metadata: DayMetadata


class MonthAvailabilityResponse(StandardizedModel):
    studio_id: str
    month: date
    availability: List[DaySummaryResponse]
