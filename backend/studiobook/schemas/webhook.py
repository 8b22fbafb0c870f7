"""Inbound webhook schemas."""

from datetime import datetime
from typing import Optional

from .base import StandardizedModel


class WebhookAckResponse(StandardizedModel):
    message: str
    event_id: str
    status: str


class WebhookEventResponse(StandardizedModel):
    id: str
    provider: str
    event_type: str
    event_id: Optional[str] = None
    status: str
    processing_error: Optional[str] = None
    processing_duration_ms: Optional[int] = None
    booking_id: Optional[str] = None
    received_at: datetime
    processed_at: Optional[datetime] = None
