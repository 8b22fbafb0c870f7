# backend/studiobook/schemas/booking.py
"""
Booking schemas.

A booking request names a local calendar date and an ``HH:mm`` start time
in the facility's clock; responses carry the stored UTC instants.
"""

from datetime import date, datetime
import re
from typing import List, Optional

from pydantic import Field, field_validator

from ..core.time_utils import is_valid_time_of_day
from .additional_service import BookingLineItemResponse
from .base import Money, StandardizedModel
from .discount import DiscountResponse
from .lead import LeadCreate, LeadResponse
from .studio import PackageResponse
from ._strict_base import StrictRequestModel

DATE_ONLY_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _ensure_date_only(value: object, field_name: str) -> object:
    if isinstance(value, str):
        candidate = value.strip()
        if not DATE_ONLY_REGEX.fullmatch(candidate):
            raise ValueError(f"{field_name} must be a YYYY-MM-DD date-only string")
        return candidate
    return value


class BookingServiceLine(StrictRequestModel):
    id: str = Field(..., description="Additional service id")
    quantity: int = Field(1, ge=1)


class BookingCreate(StrictRequestModel):
    """Create a PENDING booking for a studio interval."""

    studio_id: str
    package_id: str
    booking_date: date = Field(..., alias="date", description="Local calendar date")
    start_time: str = Field(..., description="Local start time, HH:mm")
    duration_hours: int = Field(..., ge=1, description="Whole hours")
    number_of_seats: int = Field(1, ge=1)
    lead: LeadCreate
    additional_services: List[BookingServiceLine] = Field(default_factory=list)
    discount_code: Optional[str] = Field(None, max_length=64)

    @field_validator("booking_date", mode="before")
    @classmethod
    def _enforce_date_only(cls, v: object) -> object:
        return _ensure_date_only(v, "date")

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v: str) -> str:
        if not is_valid_time_of_day(v):
            raise ValueError(f"Invalid time format: {v}. Expected HH:mm format.")
        return v

    @field_validator("discount_code")
    @classmethod
    def blank_code_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class ApplyDiscountRequest(StrictRequestModel):
    booking_id: str
    code: str = Field(..., min_length=1, max_length=64)


class BookingStudioSummary(StandardizedModel):
    id: str
    name: str
    location: str
    opening_time: str
    closing_time: str


class BookingResponse(StandardizedModel):
    id: str
    status: str
    studio_id: str
    package_id: str
    lead_id: str
    start_time: datetime
    end_time: datetime
    duration_hours: int
    number_of_seats: int
    price_per_hour: Money
    base_cost: Money
    services_cost: Money
    discount_amount: Money
    vat_amount: Money
    total_cost: Money
    currency: str
    created_at: datetime
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    studio: Optional[BookingStudioSummary] = None
    package: Optional[PackageResponse] = None
    lead: Optional[LeadResponse] = None
    discount_code: Optional[DiscountResponse] = None
    additional_services: List[BookingLineItemResponse] = Field(default_factory=list)
