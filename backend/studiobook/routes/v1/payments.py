# backend/studiobook/routes/v1/payments.py
"""
Payment routes - API v1

Endpoints:
    POST /bookings/{booking_id}/link   → Create (or reuse) the hosted payment link
    GET /bookings/{booking_id}/status  → Payment status, refreshed from the provider
    POST /bookings/{booking_id}/refund → Refund a completed payment
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Response, status

from ...api.dependencies.services import get_payment_service
from ...core.exceptions import DomainException, handle_domain_exception
from ...schemas.payment import (
    PaymentLinkResponse,
    PaymentLinkResult,
    PaymentResponse,
    PaymentStatusResponse,
    RefundRequest,
)
from ...services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payments-v1"])


@router.post(
    "/bookings/{booking_id}/link",
    response_model=PaymentLinkResult,
    status_code=status.HTTP_201_CREATED,
    responses={200: {"model": PaymentLinkResult, "description": "Existing link returned"}},
)
async def create_payment_link(
    booking_id: str,
    response: Response,
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentLinkResult:
    """Return 201 with a new link, or 200 with the booking's existing link."""
    try:
        link, created = await asyncio.to_thread(
            payment_service.create_payment_link_for_booking, booking_id
        )
    except DomainException as e:
        handle_domain_exception(e)

    if not created:
        response.status_code = status.HTTP_200_OK
    return PaymentLinkResult(
        message="Payment link created" if created else "Payment link already exists",
        payment_link=PaymentLinkResponse.model_validate(link),
    )


@router.get("/bookings/{booking_id}/status", response_model=PaymentStatusResponse)
async def get_payment_status(
    booking_id: str,
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentStatusResponse:
    try:
        result = await asyncio.to_thread(payment_service.get_payment_status, booking_id)
        return PaymentStatusResponse.model_validate(result)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/bookings/{booking_id}/refund", response_model=PaymentResponse)
async def refund_payment(
    booking_id: str,
    payload: Optional[RefundRequest] = Body(None),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentResponse:
    try:
        payment = await asyncio.to_thread(
            payment_service.refund_booking_payment,
            booking_id,
            payload.reason if payload else None,
        )
        return PaymentResponse.model_validate(payment)
    except DomainException as e:
        handle_domain_exception(e)
