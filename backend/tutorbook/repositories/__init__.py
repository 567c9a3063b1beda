"""
Repository layer for the tutoring platform.

Separates data access from the business logic in the services.

Key Components:
- BaseRepository: Generic CRUD with RepositoryException on database errors
- RepositoryFactory: Factory for creating repository instances
- ContractRepository, SessionRepository, UserRepository
- RescheduleRequestRepository, RescheduleLedgerRepository

Usage:
    from tutorbook.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_session_repository(db)
    free = repository.is_tutor_available(tutor_id, day, start, end)
"""

from .base_repository import BaseRepository
from .contract_repository import ContractRepository
from .factory import RepositoryFactory
from .reschedule_ledger_repository import RescheduleLedgerRepository
from .reschedule_request_repository import RescheduleRequestRepository
from .session_repository import SessionRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "ContractRepository",
    "RepositoryFactory",
    "RescheduleLedgerRepository",
    "RescheduleRequestRepository",
    "SessionRepository",
    "UserRepository",
]
