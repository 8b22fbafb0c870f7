# backend/studiobook/routes/v1/additional_services.py
"""
Additional services routes - API v1

Endpoints:
    POST /                                   → Create a catalog service
    GET /                                    → List services (optionally active only)
    GET /{service_id}                        → Service detail
    PUT /{service_id}                        → Update a service
    DELETE /{service_id}                     → Delete, or deactivate when referenced
    POST /booking/{booking_id}               → Attach a service to a pending booking
    GET /booking/{booking_id}                → Line items of a booking
    DELETE /booking/{booking_id}/{service_id} → Detach a service from a pending booking
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from ...api.dependencies.services import get_additional_services_service
from ...core.exceptions import DomainException, handle_domain_exception
from ...schemas.additional_service import (
    AdditionalServiceCreate,
    AdditionalServiceDeleteResponse,
    AdditionalServiceResponse,
    AdditionalServiceUpdate,
    BookingLineItemResponse,
    BookingServiceAdd,
)
from ...schemas.booking import BookingResponse
from ...services.additional_services_service import AdditionalServicesService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["additional-services-v1"])


# =============================================================================
# Booking line items (static prefix first, before /{service_id})
# =============================================================================


@router.post(
    "/booking/{booking_id}",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_service_to_booking(
    booking_id: str,
    payload: BookingServiceAdd = Body(...),
    service: AdditionalServicesService = Depends(get_additional_services_service),
) -> BookingResponse:
    """Attach a service (or replace its quantity); the booking is re-priced."""
    try:
        booking = await asyncio.to_thread(
            service.add_service_to_booking,
            booking_id,
            payload.additional_service_id,
            payload.quantity,
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/booking/{booking_id}", response_model=List[BookingLineItemResponse])
async def list_booking_services(
    booking_id: str,
    service: AdditionalServicesService = Depends(get_additional_services_service),
) -> List[BookingLineItemResponse]:
    try:
        lines = await asyncio.to_thread(service.list_booking_services, booking_id)
        return [BookingLineItemResponse.model_validate(line) for line in lines]
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/booking/{booking_id}/{service_id}", response_model=BookingResponse)
async def remove_service_from_booking(
    booking_id: str,
    service_id: str,
    service: AdditionalServicesService = Depends(get_additional_services_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            service.remove_service_from_booking, booking_id, service_id
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


# =============================================================================
# Catalog
# =============================================================================


@router.post("", response_model=AdditionalServiceResponse, status_code=status.HTTP_201_CREATED)
async def create_service(
    payload: AdditionalServiceCreate = Body(...),
    service: AdditionalServicesService = Depends(get_additional_services_service),
) -> AdditionalServiceResponse:
    try:
        created = await asyncio.to_thread(service.create_service, payload.model_dump())
        return AdditionalServiceResponse.model_validate(created)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=List[AdditionalServiceResponse])
async def list_services(
    active: Optional[bool] = Query(None),
    service: AdditionalServicesService = Depends(get_additional_services_service),
) -> List[AdditionalServiceResponse]:
    services = await asyncio.to_thread(service.list_services, active)
    return [AdditionalServiceResponse.model_validate(item) for item in services]


@router.get("/{service_id}", response_model=AdditionalServiceResponse)
async def get_service(
    service_id: str,
    service: AdditionalServicesService = Depends(get_additional_services_service),
) -> AdditionalServiceResponse:
    try:
        item = await asyncio.to_thread(service.get_service, service_id)
        return AdditionalServiceResponse.model_validate(item)
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/{service_id}", response_model=AdditionalServiceResponse)
async def update_service(
    service_id: str,
    payload: AdditionalServiceUpdate = Body(...),
    service: AdditionalServicesService = Depends(get_additional_services_service),
) -> AdditionalServiceResponse:
    try:
        item = await asyncio.to_thread(
            service.update_service, service_id, payload.model_dump(exclude_unset=True)
        )
        return AdditionalServiceResponse.model_validate(item)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{service_id}", response_model=AdditionalServiceDeleteResponse)
async def delete_service(
    service_id: str,
    service: AdditionalServicesService = Depends(get_additional_services_service),
) -> AdditionalServiceDeleteResponse:
    """Delete a service; services already used by bookings are deactivated instead."""
    try:
        result = await asyncio.to_thread(service.delete_service, service_id)
        return AdditionalServiceDeleteResponse(**result)
    except DomainException as e:
        handle_domain_exception(e)
