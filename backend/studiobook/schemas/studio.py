# backend/studiobook/schemas/studio.py
"""Studio and package schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from ..core.time_utils import is_valid_time_of_day, parse_time_of_day
from .base import Money, StandardizedModel
from ._strict_base import StrictRequestModel


class PerkCreate(StrictRequestModel):
    name: str = Field(..., min_length=1, max_length=200)
    count: Optional[int] = Field(None, ge=0)


class PackageCreate(StrictRequestModel):
    """
    Create a package.

    Without ``studio_id`` the package is shared and offered by every studio.
    """

    name: str = Field(..., min_length=1, max_length=200)
    price_per_hour: Money = Field(..., description="Hourly price")
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    description: Optional[str] = None
    delivery_time: Optional[str] = Field(None, max_length=100)
    perks: List[PerkCreate] = Field(default_factory=list)
    studio_id: Optional[str] = Field(None, description="Owning studio, null for shared packages")

    @field_validator("price_per_hour")
    @classmethod
    def validate_price(cls, v: Money) -> Money:
        if v < 0:
            raise ValueError("price_per_hour cannot be negative")
        return v


class StudioPackageCreate(StrictRequestModel):
    """Custom package created together with its studio."""

    name: str = Field(..., min_length=1, max_length=200)
    price_per_hour: Money
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    description: Optional[str] = None
    delivery_time: Optional[str] = Field(None, max_length=100)
    perks: List[PerkCreate] = Field(default_factory=list)

    @field_validator("price_per_hour")
    @classmethod
    def validate_price(cls, v: Money) -> Money:
        if v < 0:
            raise ValueError("price_per_hour cannot be negative")
        return v


class StudioCreate(StrictRequestModel):
    name: str = Field(..., min_length=1, max_length=200)
    location: str = Field(..., min_length=1, max_length=255)
    image_url: Optional[str] = Field(None, max_length=1024)
    total_seats: int = Field(..., ge=1)
    opening_time: str = Field(..., description="Local opening time, HH:mm")
    closing_time: str = Field(..., description="Local closing time, HH:mm")
    packages: List[StudioPackageCreate] = Field(default_factory=list)

    @field_validator("opening_time", "closing_time")
    @classmethod
    def validate_time_of_day(cls, v: str) -> str:
        if not is_valid_time_of_day(v):
            raise ValueError(f"Invalid time format: {v}. Expected HH:mm format.")
        return v

    @model_validator(mode="after")
    def validate_hours(self) -> "StudioCreate":
        if parse_time_of_day(self.opening_time) >= parse_time_of_day(self.closing_time):
            raise ValueError("opening_time must be before closing_time")
        return self


class PerkResponse(StandardizedModel):
    name: str
    count: Optional[int] = None


class PackageResponse(StandardizedModel):
    id: str
    name: str
    price_per_hour: Money
    currency: str
    description: Optional[str] = None
    delivery_time: Optional[str] = None
    studio_id: Optional[str] = None
    perks: List[PerkResponse] = Field(default_factory=list)


class StudioResponse(StandardizedModel):
    id: str
    name: str
    location: str
    image_url: Optional[str] = None
    total_seats: int
    opening_time: str
    closing_time: str
    created_at: datetime
    packages: List[PackageResponse] = Field(default_factory=list)


class StudioListItem(StudioResponse):
    """Studio with slot counts over the look-ahead window."""

    is_fully_booked: bool
    available_slots: int
    total_slots: int
