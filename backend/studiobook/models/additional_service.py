"""Add-on services (editing, subtitles, teleprompter) sold with a booking."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from ..core.ulid_helper import generate_ulid
from ..database import Base


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class AdditionalServiceType(str, Enum):
    STANDARD_EDIT_SHORT_FORM = "STANDARD_EDIT_SHORT_FORM"
    CUSTOM_EDIT_SHORT_FORM = "CUSTOM_EDIT_SHORT_FORM"
    STANDARD_EDIT_LONG_FORM = "STANDARD_EDIT_LONG_FORM"
    CUSTOM_EDIT_LONG_FORM = "CUSTOM_EDIT_LONG_FORM"
    LIVE_VIDEO_CUTTING = "LIVE_VIDEO_CUTTING"
    SUBTITLES = "SUBTITLES"
    TELEPROMPTER_SUPPORT = "TELEPROMPTER_SUPPORT"


class AdditionalService(Base):
    """
    Catalog entry for an add-on service.

    Inactive services stay readable so historical line items keep resolving,
    but they cannot be attached to new bookings.
    """

    __tablename__ = "additional_services"

    __table_args__ = (CheckConstraint("price >= 0", name="check_additional_service_price"),)

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="AED")
    count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_urls: Mapped[List[Any]] = mapped_column(JSON, nullable=False, default=list)
    video_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now_utc, server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, onupdate=_now_utc
    )
