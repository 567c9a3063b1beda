# backend/tutorbook/core/exceptions.py
"""
Domain-specific exceptions for the tutoring platform.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

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
    """Raised when caller input is malformed (bad status string, bad slot, wrong tutor)."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when another operation on the same contract is in flight."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class ForbiddenException(DomainException):
    """Raised when the acting party does not own the resource."""

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


# Specific business exceptions


class PendingRescheduleExistsException(BusinessRuleException):
    """Raised when a contract already has an outstanding reschedule request."""

    def __init__(self, contract_id: str):
        super().__init__(
            message=(
                "This package already has one pending reschedule request. "
                "Only one reschedule request is allowed at a time per package. "
                "Please wait for the current request to be approved or rejected "
                "before submitting another."
            ),
            code="PENDING_RESCHEDULE_EXISTS",
            details={"contract_id": contract_id},
        )


class RescheduleQuotaExhaustedException(BusinessRuleException):
    """Raised when a contract has no reschedules left."""

    def __init__(self, contract_id: str, remaining: int):
        super().__init__(
            message=(
                "You have used all your reschedule attempts for this package. "
                "No more rescheduling is allowed."
            ),
            code="RESCHEDULE_QUOTA_EXHAUSTED",
            details={"contract_id": contract_id, "remaining": remaining},
        )


class TutorUnavailableException(BusinessRuleException):
    """Raised when the availability check rejects a tutor for a window."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="TUTOR_UNAVAILABLE", details=details or {})


class ContractLockedException(ConflictException):
    """Raised when another change to the same contract holds the mutex."""

    def __init__(self, contract_id: str):
        super().__init__(
            message="Another change to this contract is in progress. Please try again.",
            code="CONTRACT_LOCKED",
            details={"contract_id": contract_id},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
