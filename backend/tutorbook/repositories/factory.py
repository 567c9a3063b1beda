# backend/tutorbook/repositories/factory.py
"""
Repository Factory for the tutoring platform.

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from .base_repository import BaseRepository

# Avoid circular imports
if TYPE_CHECKING:
    from .contract_repository import ContractRepository
    from .reschedule_ledger_repository import RescheduleLedgerRepository
    from .reschedule_request_repository import RescheduleRequestRepository
    from .session_repository import SessionRepository
    from .user_repository import UserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations in tests.
    """

    @staticmethod
    def create_base_repository(db: Session, model) -> BaseRepository:
        """
        Create a generic base repository for any model.

        Args:
            db: Database session
            model: SQLAlchemy model class

        Returns:
            BaseRepository instance
        """
        return BaseRepository(db, model)

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        """Create repository for user lookups."""
        from .user_repository import UserRepository

        return UserRepository(db)

    @staticmethod
    def create_contract_repository(db: Session) -> "ContractRepository":
        """Create repository for contract operations."""
        from .contract_repository import ContractRepository

        return ContractRepository(db)

    @staticmethod
    def create_session_repository(db: Session) -> "SessionRepository":
        """Create repository for tutoring session operations."""
        from .session_repository import SessionRepository

        return SessionRepository(db)

    @staticmethod
    def create_reschedule_request_repository(db: Session) -> "RescheduleRequestRepository":
        """Create repository for reschedule request operations."""
        from .reschedule_request_repository import RescheduleRequestRepository

        return RescheduleRequestRepository(db)

    @staticmethod
    def create_reschedule_ledger_repository(db: Session) -> "RescheduleLedgerRepository":
        """Create repository for the reschedule ledger."""
        from .reschedule_ledger_repository import RescheduleLedgerRepository

        return RescheduleLedgerRepository(db)
