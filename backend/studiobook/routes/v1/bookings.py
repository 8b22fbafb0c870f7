# backend/studiobook/routes/v1/bookings.py
"""
Booking routes - API v1

Endpoints:
    POST /                   → Create a PENDING booking
    POST /apply-discount     → Apply a discount code to a pending booking
    GET /validate-discount   → Read-only discount eligibility check
    GET /{booking_id}        → Booking detail
"""

import asyncio
from decimal import Decimal
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Query, status

from ...api.dependencies.services import get_booking_service, get_notification_service
from ...core.exceptions import DomainException, handle_domain_exception
from ...schemas.booking import ApplyDiscountRequest, BookingCreate, BookingResponse
from ...schemas.discount import DiscountValidationResponse
from ...services.booking_service import BookingService
from ...services.notification_service import NotificationService, build_booking_snapshot

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])


# =============================================================================
# Static routes first (before dynamic routes with path parameters)
# =============================================================================


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    background_tasks: BackgroundTasks,
    payload: BookingCreate = Body(...),
    booking_service: BookingService = Depends(get_booking_service),
    notification_service: NotificationService = Depends(get_notification_service),
) -> BookingResponse:
    """
    Create a booking.

    The booking is validated, priced and stored as PENDING in one
    transaction. CRM and outbound webhook notifications run after the
    response is sent and never affect it.
    """
    try:
        booking = await asyncio.to_thread(booking_service.create_booking, payload.model_dump())
    except DomainException as e:
        handle_domain_exception(e)

    background_tasks.add_task(
        notification_service.notify_booking_created, build_booking_snapshot(booking)
    )
    return BookingResponse.model_validate(booking)


@router.post("/apply-discount", response_model=BookingResponse)
async def apply_discount(
    payload: ApplyDiscountRequest = Body(...),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            booking_service.apply_discount, payload.booking_id, payload.code
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/validate-discount", response_model=DiscountValidationResponse)
async def validate_discount(
    code: str = Query(..., min_length=1, max_length=64),
    amount: Optional[Decimal] = Query(None, ge=0),
    email: Optional[str] = Query(None),
    booking_service: BookingService = Depends(get_booking_service),
) -> DiscountValidationResponse:
    """Check a code without redeeming it; ``amount`` adds the computed discount."""
    try:
        result = await asyncio.to_thread(booking_service.validate_discount, code, amount, email)
        return DiscountValidationResponse.model_validate(result)
    except DomainException as e:
        handle_domain_exception(e)


# =============================================================================
# Dynamic routes
# =============================================================================


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(booking_service.get_booking, booking_id)
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)
