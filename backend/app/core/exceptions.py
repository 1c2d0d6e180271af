# backend/app/core/exceptions.py
"""
Domain-specific exceptions for the Scheduler API.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


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
        """Convert to an HTTPException carrying the structured detail."""
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


class UnauthorizedException(DomainException):
    """Raised when user is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def to_http_exception(self) -> HTTPException:
        exc = super().to_http_exception()
        exc.headers = {"WWW-Authenticate": "Bearer"}
        return exc


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(
        self,
        message: str = "Forbidden",
        code: Optional[str] = "FORBIDDEN",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Interval normalization errors


class MalformedIntervalException(ValidationException):
    """Raised when an interval does not carry exactly two endpoints."""

    def __init__(self, size: Optional[int] = None):
        super().__init__(
            message="Interval must have exactly 2 time values",
            code="MALFORMED_INTERVAL",
            details={"size": size} if size is not None else {},
        )


class InvalidBoundaryException(ValidationException):
    """Raised when an interval endpoint is not on a 15-minute boundary."""

    def __init__(self, field: str, value: str, reason: Optional[str] = None):
        super().__init__(
            message=reason
            or f"{field} time must be on 00, 15, 30, or 45 minutes, got {value}",
            code="INVALID_BOUNDARY",
            details={"field": field, "value": value},
        )


class NoIntervalsException(ValidationException):
    """Raised when a create request carries no intervals at all."""

    def __init__(self) -> None:
        super().__init__(
            message="At least one time interval is required",
            code="NO_INTERVALS",
        )


class NoValidIntervalsException(ValidationException):
    """Raised when intervals were supplied but none survived normalization."""

    def __init__(self) -> None:
        super().__init__(
            message="No valid time intervals after processing",
            code="NO_VALID_INTERVALS",
        )


class AvailabilityStorageException(ServiceException):
    """Raised when persisting or loading availability blocks fails."""

    def __init__(self, operation: str, user_id: str, cause: Optional[Exception] = None):
        super().__init__(
            message=f"Failed to {operation.replace('_', ' ')}",
            code="STORAGE_ERROR",
            details={"operation": operation, "user_id": user_id},
        )
        self.__cause__ = cause


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
