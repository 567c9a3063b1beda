# backend/tutorbook/repositories/reschedule_request_repository.py
"""
Reschedule Request Repository for the tutoring platform.

Besides plain CRUD this repository answers the "is there already a pending
request for this contract?" question and exposes integrity errors from the
partial unique index so the service can translate them.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.enums import RescheduleRequestStatus
from ..core.exceptions import RepositoryException
from ..models.reschedule_request import RescheduleRequest
from ..models.session import TutoringSession
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class RescheduleRequestRepository(BaseRepository[RescheduleRequest]):
    """Repository for reschedule request data access."""

    def __init__(self, db: Session):
        super().__init__(db, RescheduleRequest)

    def create(self, **kwargs: Any) -> RescheduleRequest:
        """Create a request, exposing integrity errors for pending-conflict handling."""
        try:
            return super().create(**kwargs)
        except RepositoryException as exc:
            if isinstance(exc.__cause__, IntegrityError):
                raise exc.__cause__
            raise

    def has_pending_for_contract(self, contract_id: str) -> bool:
        return self.exists(
            contract_id=contract_id,
            status=RescheduleRequestStatus.PENDING.value,
        )

    def get_with_details(self, request_id: str) -> Optional[RescheduleRequest]:
        """Load a request with its original session and that session's tutor."""
        return self.get_by_id(request_id, load_relationships=True)

    def list_requests(
        self,
        parent_id: Optional[str] = None,
        status: Optional[RescheduleRequestStatus] = None,
    ) -> List[RescheduleRequest]:
        """
        Requests newest first, optionally narrowed to one parent and/or status.

        Args:
            parent_id: Only requests submitted by this parent
            status: Only requests in this status

        Returns:
            List of requests with their original sessions loaded
        """
        query = self._apply_eager_loading(self.db.query(RescheduleRequest))
        if parent_id:
            query = query.filter(RescheduleRequest.parent_id == parent_id)
        if status is not None:
            query = query.filter(RescheduleRequest.status == status.value)
        query = query.order_by(RescheduleRequest.created_at.desc(), RescheduleRequest.id.desc())
        return self._execute_query(query)

    def list_for_tutor(self, tutor_id: str) -> List[RescheduleRequest]:
        """Requests whose original session is taught by the tutor, newest first."""
        query = (
            self._apply_eager_loading(self.db.query(RescheduleRequest))
            .join(TutoringSession, RescheduleRequest.booking_id == TutoringSession.id)
            .filter(TutoringSession.tutor_id == tutor_id)
            .order_by(RescheduleRequest.created_at.desc(), RescheduleRequest.id.desc())
        )
        return self._execute_query(query)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            joinedload(RescheduleRequest.booking).joinedload(TutoringSession.tutor),
            joinedload(RescheduleRequest.requested_tutor),
        )
