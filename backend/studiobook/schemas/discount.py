"""Discount code schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator, model_validator

from ..models.discount_code import DiscountType
from .base import Money, StandardizedModel
from ._strict_base import StrictRequestModel


def _positive(v: Optional[Decimal], name: str) -> Optional[Decimal]:
    if v is not None and v <= 0:
        raise ValueError(f"{name} must be greater than 0")
    return v


class DiscountCreate(StrictRequestModel):
    code: str = Field(..., min_length=1, max_length=64)
    type: DiscountType = DiscountType.PERCENTAGE
    value: Money
    min_amount: Optional[Money] = None
    max_uses: Optional[int] = Field(None, ge=1)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: bool = True
    first_time_only: bool = False

    @field_validator("value")
    @classmethod
    def validate_value(cls, v: Money) -> Money:
        return _positive(v, "value")

    @model_validator(mode="after")
    def validate_percentage(self) -> "DiscountCreate":
        if self.type == DiscountType.PERCENTAGE and self.value > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        return self


class DiscountUpdate(StrictRequestModel):
    code: Optional[str] = Field(None, min_length=1, max_length=64)
    type: Optional[DiscountType] = None
    value: Optional[Money] = None
    min_amount: Optional[Money] = None
    max_uses: Optional[int] = Field(None, ge=1)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: Optional[bool] = None
    first_time_only: Optional[bool] = None

    @field_validator("value")
    @classmethod
    def validate_value(cls, v: Optional[Money]) -> Optional[Money]:
        return _positive(v, "value")


class DiscountResponse(StandardizedModel):
    id: str
    code: str
    type: str
    value: Money
    min_amount: Optional[Money] = None
    max_uses: Optional[int] = None
    used_count: int
    start_date: datetime
    end_date: datetime
    is_active: bool
    first_time_only: bool
    created_at: datetime


class DiscountValidationResponse(StandardizedModel):
    valid: bool
    code: str
    type: str
    value: Money
    min_amount: Optional[Money] = None
    first_time_only: bool
    discount_amount: Optional[Money] = None
