# backend/studiobook/routes/v1/leads.py
"""
Lead routes - API v1

Endpoints:
    POST /          → Create or update a lead (matched on email)
    GET /           → Paginated lead search
    GET /{lead_id}  → Lead with booking history
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Query, status

from ...api.dependencies.services import get_lead_service, get_notification_service
from ...core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ...core.exceptions import DomainException, handle_domain_exception
from ...schemas.lead import (
    LeadCreate,
    LeadDetailResponse,
    LeadListResponse,
    LeadResponse,
    LeadSortField,
    SortOrder,
)
from ...services.lead_service import LeadService
from ...services.notification_service import NotificationService, build_lead_snapshot

logger = logging.getLogger(__name__)

router = APIRouter(tags=["leads-v1"])


@router.post("", response_model=LeadResponse, status_code=status.HTTP_201_CREATED)
async def create_lead(
    background_tasks: BackgroundTasks,
    payload: LeadCreate = Body(...),
    lead_service: LeadService = Depends(get_lead_service),
    notification_service: NotificationService = Depends(get_notification_service),
) -> LeadResponse:
    """Upsert a lead and mirror it to the CRM in the background."""
    try:
        lead = await asyncio.to_thread(lead_service.create_or_update_lead, payload.model_dump())
    except DomainException as e:
        handle_domain_exception(e)

    background_tasks.add_task(notification_service.notify_lead_created, build_lead_snapshot(lead))
    return LeadResponse.model_validate(lead)


@router.get("", response_model=LeadListResponse)
async def list_leads(
    search: Optional[str] = Query(None, max_length=200),
    sort_by: LeadSortField = Query("created_at"),
    sort_order: SortOrder = Query("desc"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    lead_service: LeadService = Depends(get_lead_service),
) -> LeadListResponse:
    result = await asyncio.to_thread(
        lead_service.list_leads,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit,
    )
    return LeadListResponse.model_validate(result)


@router.get("/{lead_id}", response_model=LeadDetailResponse)
async def get_lead(
    lead_id: str,
    lead_service: LeadService = Depends(get_lead_service),
) -> LeadDetailResponse:
    try:
        lead = await asyncio.to_thread(lead_service.get_lead, lead_id)
        return LeadDetailResponse.model_validate(lead)
    except DomainException as e:
        handle_domain_exception(e)
