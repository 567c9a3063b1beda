# backend/tutorbook/services/session_service.py
"""
Session Service for the tutoring platform.

Handles the lifecycle of individual tutoring sessions:
- Status updates by the assigned tutor (day-of only)
- Tutor reassignment by staff within the contract's tutor roster
- Role-scoped session reads and listings
- Replacement tutor suggestions for a session
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.contract_lock import exclusive_contract
from ..core.enums import RoleName, SessionStatus
from ..core.exceptions import (
    BusinessRuleException,
    ForbiddenException,
    NotFoundException,
    TutorUnavailableException,
    ValidationException,
)
from ..core.timezone_utils import get_business_today
from ..models.session import TutoringSession
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .availability_service import AvailabilityService
from .base import BaseService

if TYPE_CHECKING:
    from ..repositories.contract_repository import ContractRepository
    from ..repositories.session_repository import SessionRepository
    from ..repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

ALLOWED_STATUS_LABEL = ", ".join(sorted(status.value for status in SessionStatus))


class SessionService(BaseService):
    """
    Service layer for tutoring session operations.

    Role gating happens in the API layer; the methods here only compare the
    acting user's id against the session and contract they touch.
    """

    def __init__(
        self,
        db: Session,
        session_repository: Optional["SessionRepository"] = None,
        contract_repository: Optional["ContractRepository"] = None,
        user_repository: Optional["UserRepository"] = None,
        availability_service: Optional[AvailabilityService] = None,
    ):
        """
        Initialize session service.

        Args:
            db: Database session
            session_repository: Optional SessionRepository instance
            contract_repository: Optional ContractRepository instance
            user_repository: Optional UserRepository instance
            availability_service: Optional AvailabilityService instance
        """
        super().__init__(db)
        self.session_repository = (
            session_repository or RepositoryFactory.create_session_repository(db)
        )
        self.contract_repository = (
            contract_repository or RepositoryFactory.create_contract_repository(db)
        )
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)
        self.availability_service = availability_service or AvailabilityService(
            db, session_repository=self.session_repository
        )

    # Status state machine

    @BaseService.measure_operation("update_session_status")
    def update_session_status(
        self, booking_id: str, new_status: str, acting_tutor_id: str
    ) -> TutoringSession:
        """
        Set the status of a session taught by ``acting_tutor_id``.

        Only sessions dated today (business timezone) can be updated, and
        completed or cancelled sessions are final. Writing the current status
        again is accepted and still bumps ``updated_at``.

        Args:
            booking_id: Session to update
            new_status: Target status, case-insensitive
            acting_tutor_id: Tutor performing the update

        Returns:
            The updated session

        Raises:
            NotFoundException: Session does not exist
            ForbiddenException: Caller is not the session's tutor
            ValidationException: Unknown status value
            BusinessRuleException: Session is not today, or already final
        """
        with self.transaction():
            session = self.session_repository.get_for_update(booking_id)
            if not session:
                raise NotFoundException("Session not found.")

            if session.tutor_id != acting_tutor_id:
                raise ForbiddenException("You are not the tutor assigned to this session.")

            target = SessionStatus.parse(new_status)
            if target is None:
                raise ValidationException(
                    f"Invalid status '{new_status}'. Allowed values are: {ALLOWED_STATUS_LABEL}",
                    code="INVALID_SESSION_STATUS",
                    details={"status": new_status},
                )

            today = get_business_today()
            if session.session_date != today:
                raise BusinessRuleException(
                    f"You can only update sessions scheduled for today ({today:%d/%m/%Y}). "
                    f"This session is on {session.session_date:%d/%m/%Y}.",
                    code="SESSION_NOT_TODAY",
                )

            if session.is_terminal:
                raise BusinessRuleException(
                    f"Cannot change status from '{session.status}'. "
                    "Sessions that are completed or cancelled cannot be modified.",
                    code="SESSION_FINAL",
                )

            session.set_status(target)
            self.session_repository.flush()

        return session

    # Tutor reassignment

    @BaseService.measure_operation("update_session_tutor")
    def update_session_tutor(
        self, booking_id: str, new_tutor_id: str, acting_user_id: str
    ) -> TutoringSession:
        """
        Move a session to another tutor on its contract's roster.

        Args:
            booking_id: Session to reassign
            new_tutor_id: Main or substitute tutor of the session's contract
            acting_user_id: Staff member performing the change (audit only)

        Returns:
            The updated session
        """
        session = self.session_repository.get_by_id(booking_id, load_relationships=False)
        if not session:
            raise NotFoundException("Session not found.")

        with exclusive_contract(session.contract_id):
            with self.transaction():
                session = self.session_repository.get_for_update(booking_id)
                if not session:
                    raise NotFoundException("Session not found.")

                contract = self.contract_repository.get_for_update(session.contract_id)
                if contract is None:
                    raise BusinessRuleException("Session contract not found.")

                if new_tutor_id not in contract.assigned_tutor_ids:
                    raise ValidationException(
                        "The selected tutor is not assigned to this contract. "
                        "Only the main tutor or substitute tutors can be assigned to sessions.",
                        code="TUTOR_NOT_ON_CONTRACT",
                        details={"contract_id": contract.id, "tutor_id": new_tutor_id},
                    )

                if session.is_terminal:
                    raise BusinessRuleException(
                        f"Cannot update tutor for a session with status '{session.status}'. "
                        "Only scheduled or processing sessions can have tutor changes.",
                        code="SESSION_FINAL",
                    )

                if not self.availability_service.is_tutor_available(
                    new_tutor_id,
                    session.session_date,
                    session.start_time,
                    session.end_time,
                    exclude_session_id=session.id,
                ):
                    raise TutorUnavailableException(
                        "The selected tutor is not available at the scheduled session time. "
                        "Please choose another tutor or reschedule the session.",
                        details={"tutor_id": new_tutor_id, "booking_id": session.id},
                    )

                session.assign_tutor(new_tutor_id)
                self.session_repository.flush()

        self.log_operation(
            "update_session_tutor",
            booking_id=booking_id,
            tutor_id=new_tutor_id,
            acting_user_id=acting_user_id,
        )
        return session

    # Reads

    @BaseService.measure_operation("get_session")
    def get_session(
        self, booking_id: str, user_id: str, role: RoleName
    ) -> Optional[TutoringSession]:
        """
        Fetch a session if the caller may see it.

        Parents see sessions of their own contracts, tutors the sessions they
        teach, staff and admins everything. Returns None otherwise.
        """
        session = self.session_repository.get_by_id(booking_id)
        if session is None:
            return None

        if role == RoleName.PARENT:
            if session.contract is None or session.contract.parent_id != user_id:
                return None
        elif role == RoleName.TUTOR:
            if session.tutor_id != user_id:
                return None

        return session

    @BaseService.measure_operation("list_sessions_for_parent")
    def list_sessions_for_parent(self, parent_id: str) -> List[TutoringSession]:
        return self.session_repository.list_for_parent(parent_id)

    @BaseService.measure_operation("list_sessions_for_tutor")
    def list_sessions_for_tutor(self, tutor_id: str) -> List[TutoringSession]:
        return self.session_repository.list_for_tutor(tutor_id)

    # Replacement suggestions

    @BaseService.measure_operation("get_replacement_tutors")
    def get_replacement_tutors(self, booking_id: str) -> Dict[str, Any]:
        """
        Suggest tutors who could take over a session.

        Contract substitutes that are active and free come first. Only when
        none qualifies are other active, free tutors offered.

        Returns:
            Dict with the session window, current tutor and ranked candidates
        """
        session = self.session_repository.get_by_id(booking_id)
        if not session:
            raise NotFoundException("Session not found.")

        if session.is_terminal:
            raise BusinessRuleException(
                "Cannot replace tutor for completed or cancelled session.",
                code="SESSION_FINAL",
            )

        used_ids = {session.tutor_id}
        candidates: List[Dict[str, Any]] = []

        substitute_ids = session.contract.substitute_tutor_ids if session.contract else []
        for tutor in self.user_repository.get_many(
            [tid for tid in substitute_ids if tid not in used_ids]
        ):
            if tutor.is_active and self._is_free_for(tutor.id, session):
                candidates.append(self._candidate(tutor, is_substitute=True))
                used_ids.add(tutor.id)

        if not candidates:
            for tutor in self.user_repository.list_active_tutors(exclude_ids=list(used_ids)):
                if self._is_free_for(tutor.id, session):
                    candidates.append(self._candidate(tutor, is_substitute=False))

        return {
            "booking_id": session.id,
            "session_date": session.session_date,
            "start_time": session.start_time,
            "end_time": session.end_time,
            "current_tutor_id": session.tutor_id,
            "replacement_tutors": candidates,
            "total_available": len(candidates),
            "has_substitute": any(c["is_substitute"] for c in candidates),
        }

    def _is_free_for(self, tutor_id: str, session: TutoringSession) -> bool:
        return self.availability_service.is_tutor_available(
            tutor_id, session.session_date, session.start_time, session.end_time
        )

    @staticmethod
    def _candidate(tutor: User, *, is_substitute: bool) -> Dict[str, Any]:
        return {
            "tutor_id": tutor.id,
            "full_name": tutor.full_name,
            "email": tutor.email,
            "phone": tutor.phone,
            "avatar_url": tutor.avatar_url,
            "is_substitute": is_substitute,
            "priority": "high" if is_substitute else "normal",
        }
