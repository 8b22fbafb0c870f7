# backend/studiobook/routes/v1/webhooks.py
"""
Payment provider webhooks - API v1

Endpoints:
    POST /payments → Receive a MamoPay event
    GET /events    → Recent webhook ledger entries
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Query

from ...api.dependencies.services import get_notification_service, get_payment_webhook_service
from ...core.exceptions import DomainException, handle_domain_exception
from ...schemas.webhook import WebhookAckResponse, WebhookEventResponse
from ...services.notification_service import NotificationService
from ...services.payment_webhook_service import PaymentWebhookService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["webhooks-v1"])


@router.post("/payments", response_model=WebhookAckResponse)
async def handle_payment_webhook(
    background_tasks: BackgroundTasks,
    payload: Dict[str, Any] = Body(...),
    webhook_service: PaymentWebhookService = Depends(get_payment_webhook_service),
    notification_service: NotificationService = Depends(get_notification_service),
) -> WebhookAckResponse:
    """
    Apply a payment event.

    Events other than charge success/failure are logged and acknowledged.
    A charge that confirms its booking triggers the outbound booking webhook.
    """
    logger.info(
        "Payment webhook received",
        extra={"event_type": payload.get("event_type"), "provider_id": payload.get("id")},
    )
    try:
        outcome = await asyncio.to_thread(webhook_service.handle_event, payload)
    except DomainException as e:
        handle_domain_exception(e)

    if outcome.confirmed_booking is not None:
        background_tasks.add_task(
            notification_service.notify_payment_completed, outcome.confirmed_booking
        )
    return WebhookAckResponse(
        message="Webhook processed successfully",
        event_id=outcome.event_id,
        status=outcome.status,
    )


@router.get("/events", response_model=List[WebhookEventResponse])
async def list_webhook_events(
    status: Optional[str] = Query(None),
    event_type: Optional[str] = Query(None),
    booking_id: Optional[str] = Query(None),
    since_hours: int = Query(24, ge=1, le=24 * 30),
    limit: int = Query(50, ge=1, le=500),
    webhook_service: PaymentWebhookService = Depends(get_payment_webhook_service),
) -> List[WebhookEventResponse]:
    events = await asyncio.to_thread(
        webhook_service.list_events,
        status=status,
        event_type=event_type,
        booking_id=booking_id,
        since_hours=since_hours,
        limit=limit,
    )
    return [WebhookEventResponse.model_validate(event) for event in events]
