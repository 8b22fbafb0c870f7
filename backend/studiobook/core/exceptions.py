# backend/studiobook/core/exceptions.py
"""
Domain-specific exceptions for the studio booking platform.

These exceptions carry a business-focused message, a stable code and
structured details. Routes convert them to HTTP errors through
``to_http_exception``.
"""

from typing import Any, Dict, NoReturn, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class ServiceException(DomainException):
    """Raised when a service operation fails. Callers may retry."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific business exceptions


class SlotUnavailableException(ValidationException):
    """Raised when the requested interval is outside hours or already taken."""

    def __init__(self, message: Optional[str] = None, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message or "Selected time slot is not available",
            code="SLOT_UNAVAILABLE",
            details=details or {},
        )


class CapacityExceededException(ValidationException):
    """Raised when more seats are requested than the studio holds."""

    def __init__(self, requested: int, capacity: int):
        super().__init__(
            message=f"Number of seats exceeds studio capacity of {capacity}",
            code="CAPACITY_EXCEEDED",
            details={"requested": requested, "capacity": capacity},
        )


class DiscountIneligibleException(ValidationException):
    """Raised when a discount code cannot be redeemed."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="DISCOUNT_INELIGIBLE", details=details or {})


class BookingTimeoutException(ServiceException):
    """Raised when the booking transaction times out or loses a lock."""

    def __init__(self, message: Optional[str] = None, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message or "Booking could not be completed in time, please retry",
            code="BOOKING_TIMEOUT",
            details={"retryable": True, **(details or {})},
        )


class PaymentProviderException(ServiceException):
    """Raised when the payment provider rejects or cannot serve a request."""

    status_code = status.HTTP_502_BAD_GATEWAY


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    Used when data access operations fail, such as connection issues,
    query failures, or constraint violations.
    """


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
