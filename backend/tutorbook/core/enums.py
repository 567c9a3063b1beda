# backend/tutorbook/core/enums.py
"""
Core enums for the tutoring platform.

This module contains enumeration types used throughout the application
for type safety and consistency. All of them inherit from (str, Enum) so
the stored database value is the lowercase enum value.
"""

from enum import Enum


class RoleName(str, Enum):
    """
    Closed set of roles carried in access tokens.

    Role gating happens at the API boundary only; services receive plain ids.
    """

    PARENT = "parent"
    TUTOR = "tutor"
    STAFF = "staff"
    ADMIN = "admin"


class UserStatus(str, Enum):
    """Account lifecycle statuses."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    BANNED = "banned"


class SessionStatus(str, Enum):
    """Session lifecycle statuses."""

    SCHEDULED = "scheduled"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"

    @classmethod
    def parse(cls, raw: str) -> "SessionStatus | None":
        """Case-insensitive lookup; None for unknown values."""
        normalized = (raw or "").strip().lower()
        for status in cls:
            if status.value == normalized:
                return status
        return None

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_SESSION_STATUSES


# No status transition is permitted out of these
TERMINAL_SESSION_STATUSES = frozenset({SessionStatus.COMPLETED, SessionStatus.CANCELLED})

# Sessions in these statuses occupy their tutor's time window
BLOCKING_SESSION_STATUSES = (SessionStatus.SCHEDULED, SessionStatus.PROCESSING)


class RescheduleRequestStatus(str, Enum):
    """Reschedule request lifecycle statuses."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ContractStatus(str, Enum):
    """Contract lifecycle statuses."""

    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
