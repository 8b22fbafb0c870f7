# backend/studiobook/main.py
"""
FastAPI application for the studio booking platform.

Run locally with ``uvicorn studiobook.main:app --reload`` from ``backend/``.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from . import models  # noqa: F401
from .core.config import is_running_tests, settings
from .core.constants import BRAND_NAME
from .database import Base, engine
from .errors import register_error_handlers
from .routes.v1 import (
    additional_services as additional_services_v1,
    bookings as bookings_v1,
    discounts as discounts_v1,
    leads as leads_v1,
    packages as packages_v1,
    payments as payments_v1,
    studios as studios_v1,
    webhooks as webhooks_v1,
)
from .schemas.base import HealthResponse

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def _log_integration_summary() -> None:
    """Report which outbound collaborators are disabled by missing configuration."""
    if not settings.mamopay_api_key.get_secret_value():
        logger.warning("MamoPay API key not configured; payment endpoints will return errors")
    if not settings.notion_api_key.get_secret_value():
        logger.info("Notion API key not configured; CRM entries are disabled")
    if not settings.booking_webhook_url:
        logger.info("Booking webhook URL not configured; outbound booking webhook is disabled")


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown without deprecated events."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {settings.environment}")

    if is_running_tests():
        logger.info("Running under pytest (test mode active)")
    elif settings.is_sqlite:
        # Local SQLite databases have no migrations; create tables on boot.
        Base.metadata.create_all(bind=engine)

    _log_integration_summary()

    yield

    logger.info(f"{BRAND_NAME} API shutting down...")
    engine.dispose()


def _unique_operation_id(route: APIRoute) -> str:
    methods = "_".join(sorted(m.lower() for m in route.methods or []))
    path = route.path_format.replace("/", "_").replace("{", "").replace("}", "").strip("_")
    name = (route.name or "operation").lower().replace(" ", "_")
    return f"{methods}__{path}__{name}".strip("_")


app = FastAPI(
    title=settings.api_title,
    description="Studio rental booking and payment API",
    version=settings.api_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
    generate_unique_id_function=_unique_operation_id,
)

# Register unified error envelope handlers
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create API v1 router
api_v1 = APIRouter(prefix="/api/v1")

api_v1.include_router(studios_v1.router, prefix="/studios")
api_v1.include_router(packages_v1.router, prefix="/packages")
api_v1.include_router(leads_v1.router, prefix="/leads")
api_v1.include_router(discounts_v1.router, prefix="/discounts")
api_v1.include_router(additional_services_v1.router, prefix="/additional-services")
api_v1.include_router(bookings_v1.router, prefix="/bookings")
api_v1.include_router(payments_v1.router, prefix="/payments")
api_v1.include_router(webhooks_v1.router, prefix="/webhooks")

app.include_router(api_v1)


@app.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Liveness probe."""
    return HealthResponse(
        status="healthy",
        service=f"{BRAND_NAME.lower()}-api",
        version=settings.api_version,
        environment=settings.environment,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )
