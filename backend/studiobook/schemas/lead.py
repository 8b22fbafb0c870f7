"""Lead schemas."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import EmailStr, Field, field_validator

from .base import Money, StandardizedModel
from ._strict_base import StrictRequestModel


class LeadCreate(StrictRequestModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, max_length=50)
    whatsapp_number: Optional[str] = Field(None, max_length=50)
    recording_location: Optional[str] = Field(None, max_length=255)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v


class LeadResponse(StandardizedModel):
    id: str
    full_name: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    whatsapp_number: Optional[str] = None
    recording_location: Optional[str] = None
    created_at: datetime


class LeadBookingSummary(StandardizedModel):
    id: str
    studio_id: str
    start_time: datetime
    end_time: datetime
    status: str
    total_cost: Money


class LeadDetailResponse(LeadResponse):
    bookings: List[LeadBookingSummary] = Field(default_factory=list)


class PaginationMeta(StandardizedModel):
    total: int
    page: int
    limit: int
    pages: int


class LeadListResponse(StandardizedModel):
    leads: List[LeadResponse]
    pagination: PaginationMeta


LeadSortField = Literal["created_at", "full_name", "email"]
SortOrder = Literal["asc", "desc"]
