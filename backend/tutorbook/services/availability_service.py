"""
Availability oracle for tutors.

Answers whether a tutor is free for a window on a date. The answer comes
from the session store: a tutor is busy when a scheduled or in-progress
session of theirs overlaps the window.
"""

from datetime import date, time
import logging
from typing import TYPE_CHECKING, Optional

from sqlalchemy.orm import Session

from ..repositories.factory import RepositoryFactory
from .base import BaseService

if TYPE_CHECKING:
    from ..repositories.session_repository import SessionRepository

logger = logging.getLogger(__name__)


class AvailabilityService(BaseService):
    """Read-only tutor availability checks."""

    def __init__(self, db: Session, session_repository: Optional["SessionRepository"] = None):
        super().__init__(db)
        self.session_repository = (
            session_repository or RepositoryFactory.create_session_repository(db)
        )

    @BaseService.measure_operation("is_tutor_available")
    def is_tutor_available(
        self,
        tutor_id: str,
        session_date: date,
        start_time: time,
        end_time: time,
        exclude_session_id: Optional[str] = None,
    ) -> bool:
        """
        Check whether ``tutor_id`` can take ``[start_time, end_time)`` on ``session_date``.

        Args:
            tutor_id: Tutor to check
            session_date: Date of the window
            start_time: Window start
            end_time: Window end
            exclude_session_id: Session ignored by the check (the one being moved or reassigned)

        Returns:
            True when no blocking session overlaps the window
        """
        available = self.session_repository.is_tutor_available(
            tutor_id, session_date, start_time, end_time, exclude_session_id
        )
        if not available:
            self.logger.debug(
                f"Tutor {tutor_id} busy on {session_date} {start_time}-{end_time}"
            )
        return available
