# backend/helpdesk/core/exceptions.py
"""
Domain-specific exceptions for the presence module.

These exceptions carry business-focused messages and know how to turn
themselves into HTTP errors at the API layer.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from fastapi import HTTPException, status

if TYPE_CHECKING:
    from ..services.presence_validation import ValidationError

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


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Presence-specific exceptions


class PresenceValidationException(ValidationException):
    """
    Raised with the complete list of field-tagged problems in a plan request.

    Callers always receive every error in one pass, never just the first.
    """

    status_code = HTTP_422_UNPROCESSABLE

    def __init__(
        self,
        errors: Sequence["ValidationError"],
        message: str = "Business rule validation failed",
    ) -> None:
        self.errors: List["ValidationError"] = list(errors)
        super().__init__(
            message=message,
            code="PRESENCE_VALIDATION_FAILED",
            details={"errors": [error.to_dict() for error in self.errors]},
        )


class SegmentOwnershipException(ForbiddenException):
    """Raised when a user tries to modify someone else's presence segment."""

    def __init__(self, segment_id: str) -> None:
        super().__init__(
            message="Unauthorized: You can only delete your own segments",
            code="UNAUTHORIZED",
            details={"segment_id": segment_id},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    Used when data access operations fail, such as connection issues,
    query failures, or constraint violations.
    """


def is_db_pool_exhaustion(exc: Exception) -> bool:
    """Check if an exception indicates DB connection pool exhaustion."""
    error_str = str(exc).lower()
    return "queuepool" in error_str or (
        "timeout" in error_str and ("connection" in error_str or "pool" in error_str)
    )


def raise_503_if_pool_exhaustion(exc: Exception) -> None:
    """
    Convert DB pool exhaustion errors to HTTP 503 (Service Unavailable).

    Raises:
        HTTPException: 503 if pool exhaustion detected
        Does not raise if not pool exhaustion (caller should re-raise original)
    """
    if is_db_pool_exhaustion(exc):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service temporarily overloaded. Please retry.",
            headers={"Retry-After": "2"},
        )
