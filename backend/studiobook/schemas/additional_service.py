"""Additional service schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from ..models.additional_service import AdditionalServiceType
from .base import Money, StandardizedModel
from ._strict_base import StrictRequestModel


class AdditionalServiceCreate(StrictRequestModel):
    title: str = Field(..., min_length=1, max_length=200)
    type: AdditionalServiceType
    price: Money
    currency: str = Field("AED", min_length=3, max_length=3)
    count: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    image_urls: List[str] = Field(default_factory=list)
    video_url: Optional[str] = Field(None, max_length=1024)
    is_active: bool = True

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: Money) -> Money:
        if v < 0:
            raise ValueError("price cannot be negative")
        return v


class AdditionalServiceUpdate(StrictRequestModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[AdditionalServiceType] = None
    price: Optional[Money] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    count: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    image_urls: Optional[List[str]] = None
    video_url: Optional[str] = Field(None, max_length=1024)
    is_active: Optional[bool] = None

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: Optional[Money]) -> Optional[Money]:
        if v is not None and v < 0:
            raise ValueError("price cannot be negative")
        return v


class AdditionalServiceResponse(StandardizedModel):
    id: str
    title: str
    type: str
    price: Money
    currency: str
    count: Optional[int] = None
    description: Optional[str] = None
    image_urls: List[str] = Field(default_factory=list)
    video_url: Optional[str] = None
    is_active: bool
    created_at: datetime


class AdditionalServiceDeleteResponse(StandardizedModel):
    deleted: bool
    deactivated: bool


class BookingServiceAdd(StrictRequestModel):
    additional_service_id: str
    quantity: int = Field(1, ge=1)


class BookingLineItemResponse(StandardizedModel):
    id: str
    additional_service_id: str
    quantity: int
    price: Money
    line_total: Money
    additional_service: Optional[AdditionalServiceResponse] = None
