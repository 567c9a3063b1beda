"""
Database models for the tutoring platform.

This module exports all SQLAlchemy models used by the session engine:
- Users (parents, tutors, staff)
- Packages and contracts
- Tutoring sessions
- Reschedule requests and the reschedule ledger
"""

from .contract import Contract
from .package import Package
from .reschedule_ledger import RescheduleLedgerEntry
from .reschedule_request import RescheduleRequest
from .session import TutoringSession
from .user import User

__all__ = [
    "Contract",
    "Package",
    "RescheduleLedgerEntry",
    "RescheduleRequest",
    "TutoringSession",
    "User",
]
