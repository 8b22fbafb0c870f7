"""Request and response models."""

from .base import HealthResponse, Money, StandardizedModel
from ._strict_base import StrictRequestModel

__all__ = [
    "HealthResponse",
    "Money",
    "StandardizedModel",
    "StrictRequestModel",
]
