# backend/studiobook/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import (
    additional_services,
    bookings,
    discounts,
    leads,
    packages,
    payments,
    studios,
    webhooks,
)

__all__ = [
    "additional_services",
    "bookings",
    "discounts",
    "leads",
    "packages",
    "payments",
    "studios",
    "webhooks",
]
