# backend/tutorbook/repositories/session_repository.py
"""
Session Repository for the tutoring platform.

Implements data access for tutoring sessions:
- Single-session lookups (with contract) and row locking
- Batch inserts for sessions materialised by an approval
- Overlap checks backing tutor availability
- Parent and tutor session listings
"""

from datetime import date, time
import logging
from typing import List, Optional, cast

from sqlalchemy.orm import Query, Session, joinedload

from ..core.enums import BLOCKING_SESSION_STATUSES
from ..core.exceptions import RepositoryException
from ..models.contract import Contract
from ..models.session import TutoringSession
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class SessionRepository(BaseRepository[TutoringSession]):
    """Repository for tutoring session data access."""

    def __init__(self, db: Session):
        """Initialize with TutoringSession model."""
        super().__init__(db, TutoringSession)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(joinedload(TutoringSession.contract))

    # Availability

    def get_conflicting_sessions(
        self,
        tutor_id: str,
        session_date: date,
        start_time: time,
        end_time: time,
        exclude_session_id: Optional[str] = None,
    ) -> List[TutoringSession]:
        """
        Sessions of a tutor that occupy any part of ``[start_time, end_time)``.

        Only scheduled and in-progress sessions block a window; finished,
        cancelled and rescheduled ones never do.

        Args:
            tutor_id: The tutor ID
            session_date: The date to check
            start_time: Window start
            end_time: Window end
            exclude_session_id: Optional session to ignore (one being moved or reassigned)

        Returns:
            List of overlapping sessions
        """
        try:
            query = self.db.query(TutoringSession).filter(
                TutoringSession.tutor_id == tutor_id,
                TutoringSession.session_date == session_date,
                TutoringSession.status.in_([status.value for status in BLOCKING_SESSION_STATUSES]),
                # Any overlap with the window
                TutoringSession.start_time < end_time,
                TutoringSession.end_time > start_time,
            )

            if exclude_session_id:
                query = query.filter(TutoringSession.id != exclude_session_id)

            return cast(List[TutoringSession], query.all())

        except Exception as e:
            self.logger.error(f"Error getting sessions by time range: {str(e)}")
            raise RepositoryException(f"Failed to get sessions by time: {str(e)}")

    def is_tutor_available(
        self,
        tutor_id: str,
        session_date: date,
        start_time: time,
        end_time: time,
        exclude_session_id: Optional[str] = None,
    ) -> bool:
        """True when no blocking session of the tutor overlaps the window."""
        conflicts = self.get_conflicting_sessions(
            tutor_id, session_date, start_time, end_time, exclude_session_id
        )
        return len(conflicts) == 0

    # Listings

    def list_for_parent(self, parent_id: str) -> List[TutoringSession]:
        """All sessions under the parent's contracts, by date and start time."""
        query = (
            self.db.query(TutoringSession)
            .join(Contract, TutoringSession.contract_id == Contract.id)
            .filter(Contract.parent_id == parent_id)
            .order_by(TutoringSession.session_date, TutoringSession.start_time)
        )
        return self._execute_query(query)

    def list_for_tutor(self, tutor_id: str) -> List[TutoringSession]:
        """All sessions currently taught by the tutor, by date and start time."""
        query = (
            self.db.query(TutoringSession)
            .filter(TutoringSession.tutor_id == tutor_id)
            .order_by(TutoringSession.session_date, TutoringSession.start_time)
        )
        return self._execute_query(query)
