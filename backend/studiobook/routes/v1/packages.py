# backend/studiobook/routes/v1/packages.py
"""
Package routes - API v1

Endpoints:
    POST /             → Create a shared (default) or studio-owned package
    GET /              → List packages, optionally filtered by studio
    GET /{package_id}  → Package with perks
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from ...api.dependencies.services import get_package_service
from ...core.exceptions import DomainException, handle_domain_exception
from ...schemas.studio import PackageCreate, PackageResponse
from ...services.studio_service import PackageService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["packages-v1"])


@router.post("", response_model=PackageResponse, status_code=status.HTTP_201_CREATED)
async def create_package(
    payload: PackageCreate = Body(...),
    package_service: PackageService = Depends(get_package_service),
) -> PackageResponse:
    try:
        package = await asyncio.to_thread(package_service.create_package, payload.model_dump())
        return PackageResponse.model_validate(package)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=List[PackageResponse])
async def list_packages(
    studio_id: Optional[str] = Query(None),
    package_service: PackageService = Depends(get_package_service),
) -> List[PackageResponse]:
    packages = await asyncio.to_thread(package_service.list_packages, studio_id)
    return [PackageResponse.model_validate(package) for package in packages]


@router.get("/{package_id}", response_model=PackageResponse)
async def get_package(
    package_id: str,
    package_service: PackageService = Depends(get_package_service),
) -> PackageResponse:
    try:
        package = await asyncio.to_thread(package_service.get_package, package_id)
        return PackageResponse.model_validate(package)
    except DomainException as e:
        handle_domain_exception(e)
