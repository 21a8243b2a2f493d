# backend/roombook/core/exceptions.py
"""
Domain-specific exceptions for RoomBook.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

from .constants import NOT_SESSION_OWNER_MESSAGE, STORE_UNAVAILABLE_MESSAGE


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

    def _detail(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }

    def to_http_exception(self) -> HTTPException:
        """Default conversion to HTTPException (override status_code in subclasses)."""
        return HTTPException(status_code=self.status_code, detail=self._detail())


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


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


# Specific business exceptions


class InvalidSelectionException(ValidationException):
    """Raised when a date or slot choice is stale, tampered, or outside what was offered."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_SELECTION", details=details or {})


class SessionOwnershipException(ForbiddenException):
    """Raised when someone other than the session owner sends an event."""

    def __init__(self, session_id: str):
        super().__init__(
            message=NOT_SESSION_OWNER_MESSAGE,
            code="NOT_SESSION_OWNER",
            details={"session_id": session_id},
        )


class SessionExpiredException(DomainException):
    """Raised when an event arrives for a session that has expired."""

    status_code = status.HTTP_410_GONE

    def __init__(self, session_id: str):
        super().__init__(
            message="This booking session has expired. Please start a new booking.",
            code="SESSION_EXPIRED",
            details={"session_id": session_id},
        )


class StoreUnavailableException(ServiceException):
    """
    Raised when the reservation store failed and the outcome could not be resolved.

    Retryable: no reservation is assumed to exist for this attempt.
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: Optional[str] = None, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message or STORE_UNAVAILABLE_MESSAGE,
            code="STORE_UNAVAILABLE",
            details={"retryable": True, **(details or {})},
        )

    def to_http_exception(self) -> HTTPException:
        exc = super().to_http_exception()
        exc.headers = {"Retry-After": "2"}
        return exc


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """


class ReservationUniquenessViolation(RepositoryException):
    """The store rejected a reservation because (section_id, starts_at) is already taken."""

    def __init__(self, section_id: str, starts_at: Any):
        self.section_id = section_id
        self.starts_at = starts_at
        super().__init__(f"Reservation already exists for section {section_id} at {starts_at}")
