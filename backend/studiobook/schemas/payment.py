"""Payment schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import Money, StandardizedModel
from ._strict_base import StrictRequestModel


class PaymentLinkResponse(StandardizedModel):
    id: str
    booking_id: str
    external_id: str
    url: str
    amount: Money
    currency: str
    status: str
    created_at: datetime


class PaymentLinkResult(StandardizedModel):
    message: str
    payment_link: PaymentLinkResponse


class PaymentStatusResponse(StandardizedModel):
    booking_id: str
    booking_status: str
    payment_id: str
    status: str
    amount: Money
    currency: str
    payment_link: Optional[str] = None


class RefundRequest(StrictRequestModel):
    reason: Optional[str] = Field(None, max_length=500)


class PaymentResponse(StandardizedModel):
    id: str
    booking_id: str
    provider: str
    external_id: Optional[str] = None
    transaction_id: Optional[str] = None
    amount: Money
    currency: str
    status: str
    refund_amount: Optional[Money] = None
    refund_reason: Optional[str] = None
    refunded_at: Optional[datetime] = None
