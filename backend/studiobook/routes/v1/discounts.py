# backend/studiobook/routes/v1/discounts.py
"""
Discount code routes - API v1

Endpoints:
    POST /               → Create a code
    GET /                → List codes
    GET /{discount_id}   → Code detail
    PUT /{discount_id}   → Update a code
    DELETE /{discount_id} → Delete a code that no booking references
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status

from ...api.dependencies.services import get_discount_service
from ...core.exceptions import DomainException, handle_domain_exception
from ...schemas.discount import DiscountCreate, DiscountResponse, DiscountUpdate
from ...services.discount_service import DiscountService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["discounts-v1"])


@router.post("", response_model=DiscountResponse, status_code=status.HTTP_201_CREATED)
async def create_discount(
    payload: DiscountCreate = Body(...),
    discount_service: DiscountService = Depends(get_discount_service),
) -> DiscountResponse:
    try:
        discount = await asyncio.to_thread(
            discount_service.create_discount, payload.model_dump(exclude_none=True)
        )
        return DiscountResponse.model_validate(discount)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=List[DiscountResponse])
async def list_discounts(
    active: Optional[bool] = Query(None),
    discount_service: DiscountService = Depends(get_discount_service),
) -> List[DiscountResponse]:
    discounts = await asyncio.to_thread(discount_service.list_discounts, active)
    return [DiscountResponse.model_validate(discount) for discount in discounts]


@router.get("/{discount_id}", response_model=DiscountResponse)
async def get_discount(
    discount_id: str,
    discount_service: DiscountService = Depends(get_discount_service),
) -> DiscountResponse:
    try:
        discount = await asyncio.to_thread(discount_service.get_discount, discount_id)
        return DiscountResponse.model_validate(discount)
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/{discount_id}", response_model=DiscountResponse)
async def update_discount(
    discount_id: str,
    payload: DiscountUpdate = Body(...),
    discount_service: DiscountService = Depends(get_discount_service),
) -> DiscountResponse:
    try:
        discount = await asyncio.to_thread(
            discount_service.update_discount, discount_id, payload.model_dump(exclude_unset=True)
        )
        return DiscountResponse.model_validate(discount)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{discount_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_discount(
    discount_id: str,
    discount_service: DiscountService = Depends(get_discount_service),
) -> Response:
    try:
        await asyncio.to_thread(discount_service.delete_discount, discount_id)
    except DomainException as e:
        handle_domain_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
