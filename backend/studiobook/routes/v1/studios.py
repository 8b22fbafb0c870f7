# backend/studiobook/routes/v1/studios.py
"""
Studio routes - API v1

Endpoints:
    POST /                        → Create a studio with default and custom packages
    GET /                         → List studios with a look-ahead availability summary
    GET /{studio_id}              → Studio with its packages
    GET /{studio_id}/availability → Month or day availability
    GET /{studio_id}/packages     → Packages offered by a studio
"""

import asyncio
from datetime import date
import logging
from typing import List, Literal, Union

from fastapi import APIRouter, Body, Depends, Query, status

from ...api.dependencies.services import get_availability_service, get_studio_service
from ...core.exceptions import DomainException, handle_domain_exception
from ...schemas.availability import DayAvailabilityResponse, MonthAvailabilityResponse
from ...schemas.studio import PackageResponse, StudioCreate, StudioListItem, StudioResponse
from ...services.availability_service import AvailabilityService
from ...services.studio_service import StudioService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["studios-v1"])


@router.post("", response_model=StudioResponse, status_code=status.HTTP_201_CREATED)
async def create_studio(
    payload: StudioCreate = Body(...),
    studio_service: StudioService = Depends(get_studio_service),
) -> StudioResponse:
    """Create a studio linked to every default package plus its own custom packages."""
    try:
        studio = await asyncio.to_thread(studio_service.create_studio, payload.model_dump())
        return StudioResponse.model_validate(studio)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=List[StudioListItem])
async def list_studios(
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> List[StudioListItem]:
    try:
        rows = await asyncio.to_thread(availability_service.list_studios_with_availability)
    except DomainException as e:
        handle_domain_exception(e)

    return [
        StudioListItem(
            **StudioResponse.model_validate(studio).model_dump(),
            is_fully_booked=summary.is_fully_booked,
            available_slots=summary.available_slots,
            total_slots=summary.total_slots,
        )
        for studio, summary in rows
    ]


@router.get("/{studio_id}", response_model=StudioResponse)
async def get_studio(
    studio_id: str,
    studio_service: StudioService = Depends(get_studio_service),
) -> StudioResponse:
    try:
        studio = await asyncio.to_thread(studio_service.get_studio, studio_id)
        return StudioResponse.model_validate(studio)
    except DomainException as e:
        handle_domain_exception(e)


@router.get(
    "/{studio_id}/availability",
    response_model=Union[MonthAvailabilityResponse, DayAvailabilityResponse],
)
async def get_studio_availability(
    studio_id: str,
    target_date: date = Query(..., alias="date", description="Local date, YYYY-MM-DD"),
    view: Literal["month", "day"] = Query("month"),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> Union[MonthAvailabilityResponse, DayAvailabilityResponse]:
    """
    Availability for a studio.

    ``view=month`` rolls up every day of the month containing ``date``;
    ``view=day`` returns the hourly slots of ``date``.
    """
    try:
        if view == "day":
            result = await asyncio.to_thread(
                availability_service.get_day_availability, studio_id, target_date
            )
            return DayAvailabilityResponse.model_validate(result)
        result = await asyncio.to_thread(
            availability_service.get_month_availability,
            studio_id,
            target_date.year,
            target_date.month,
        )
        return MonthAvailabilityResponse.model_validate(result)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{studio_id}/packages", response_model=List[PackageResponse])
async def get_studio_packages(
    studio_id: str,
    studio_service: StudioService = Depends(get_studio_service),
) -> List[PackageResponse]:
    try:
        packages = await asyncio.to_thread(studio_service.get_studio_packages, studio_id)
        return [PackageResponse.model_validate(package) for package in packages]
    except DomainException as e:
        handle_domain_exception(e)
