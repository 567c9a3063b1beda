# backend/tutorbook/services/reschedule_service.py
"""
Reschedule Service for the tutoring platform.

Parents propose moving a session to another date and slot; staff approve or
reject. Approval is a single unit of work: the replacement session is
created, the original is marked rescheduled, the contract's quota is
decremented and the request is closed, or none of it happens.

Every mutation of a contract's reschedule state runs under the contract
mutex and inside one database transaction with the affected rows locked.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.constants import SlotStart, describe_slot_starts
from ..core.contract_lock import exclusive_contract
from ..core.enums import RescheduleRequestStatus, RoleName, SessionStatus
from ..core.exceptions import (
    BusinessRuleException,
    ForbiddenException,
    NotFoundException,
    PendingRescheduleExistsException,
    TutorUnavailableException,
    ValidationException,
)
from ..core.timezone_utils import get_business_today
from ..models.reschedule_request import RescheduleRequest
from ..models.session import TutoringSession
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..schemas.reschedule import (
    ApproveRescheduleRequest,
    RescheduleRequestCreate,
    RescheduleResponse,
)
from .availability_service import AvailabilityService
from .base import BaseService
from .contract_quota_service import ContractQuotaService

if TYPE_CHECKING:
    from ..repositories.contract_repository import ContractRepository
    from ..repositories.reschedule_request_repository import RescheduleRequestRepository
    from ..repositories.session_repository import SessionRepository
    from ..repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class RescheduleService(BaseService):
    """
    Service layer for the reschedule request workflow.

    Handles:
    - Request creation with slot, ownership, timing and quota checks
    - Staff approval (new session, quota decrement, ledger entry)
    - Staff rejection
    - Request reads and substitute-tutor discovery
    """

    def __init__(
        self,
        db: Session,
        request_repository: Optional["RescheduleRequestRepository"] = None,
        session_repository: Optional["SessionRepository"] = None,
        contract_repository: Optional["ContractRepository"] = None,
        user_repository: Optional["UserRepository"] = None,
        availability_service: Optional[AvailabilityService] = None,
        quota_service: Optional[ContractQuotaService] = None,
    ):
        """
        Initialize reschedule service.

        Args:
            db: Database session
            request_repository: Optional RescheduleRequestRepository instance
            session_repository: Optional SessionRepository instance
            contract_repository: Optional ContractRepository instance
            user_repository: Optional UserRepository instance
            availability_service: Optional AvailabilityService instance
            quota_service: Optional ContractQuotaService instance
        """
        super().__init__(db)
        self.request_repository = (
            request_repository or RepositoryFactory.create_reschedule_request_repository(db)
        )
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
        self.quota_service = quota_service or ContractQuotaService(
            db, contract_repository=self.contract_repository
        )

    # Create

    @BaseService.measure_operation("create_reschedule_request")
    def create_request(self, parent_id: str, data: RescheduleRequestCreate) -> RescheduleResponse:
        """
        Submit a reschedule request for one of the parent's sessions.

        Checks run in a fixed order and the first failure is reported:
        slot start, slot end, session exists, ownership, not in the past,
        no pending request on the contract, contract exists, quota left,
        date within the contract.

        Nothing but the new pending request is written.
        """
        self._validate_slot(data)

        session = self.session_repository.get_by_id(data.booking_id, load_relationships=False)
        if not session:
            raise NotFoundException("Session not found.")

        contract_id = session.contract_id
        with exclusive_contract(contract_id):
            with self.transaction():
                session = self.session_repository.get_by_id(data.booking_id)
                if not session:
                    raise NotFoundException("Session not found.")

                if session.contract is not None and session.contract.parent_id != parent_id:
                    raise ForbiddenException("You can only reschedule your child's sessions.")

                if session.is_past(get_business_today()):
                    raise BusinessRuleException(
                        "Cannot reschedule past sessions.", code="SESSION_IN_PAST"
                    )

                if self.request_repository.has_pending_for_contract(contract_id):
                    raise PendingRescheduleExistsException(contract_id)

                contract = self.contract_repository.get_with_package(contract_id)
                if contract is None:
                    raise NotFoundException("Contract not found.")

                self.quota_service.ensure_can_request(contract, data.requested_date)

                try:
                    request = self.request_repository.create(
                        booking_id=session.id,
                        contract_id=contract_id,
                        parent_id=parent_id,
                        requested_date=data.requested_date,
                        start_time=data.start_time,
                        end_time=data.end_time,
                        requested_tutor_id=data.requested_tutor_id or session.tutor_id,
                        reason=data.reason,
                        status=RescheduleRequestStatus.PENDING.value,
                    )
                except IntegrityError:
                    # Lost the race on the one-pending-per-contract index
                    raise PendingRescheduleExistsException(contract_id)

        prometheus_metrics.record_reschedule_decision("created")
        self.log_operation(
            "create_reschedule_request",
            request_id=request.id,
            booking_id=request.booking_id,
            contract_id=contract_id,
            parent_id=parent_id,
        )
        return RescheduleResponse(
            request_id=request.id,
            status=RescheduleRequestStatus.PENDING,
            message="Reschedule request submitted successfully. Waiting for staff approval.",
        )

    @staticmethod
    def _validate_slot(data: RescheduleRequestCreate) -> None:
        slot = SlotStart.from_time(data.start_time)
        if slot is None:
            raise ValidationException(
                f"Start time must be {describe_slot_starts()}.",
                code="INVALID_SLOT_START",
                details={"start_time": data.start_time.strftime("%H:%M")},
            )

        expected_end = slot.end_time
        if data.end_time.replace(tzinfo=None) != expected_end:
            raise ValidationException(
                f"End time must be {expected_end:%H:%M} (90 minutes after start time).",
                code="INVALID_SLOT_END",
                details={
                    "start_time": slot.label,
                    "end_time": data.end_time.strftime("%H:%M"),
                },
            )

    # Approve

    @BaseService.measure_operation("approve_reschedule_request")
    def approve_request(
        self, staff_id: str, request_id: str, data: ApproveRescheduleRequest
    ) -> RescheduleResponse:
        """
        Approve a pending request.

        In one transaction: a scheduled session is created on the requested
        date and window (same contract, inherited location), the original
        session becomes ``rescheduled``, the contract's quota drops by one,
        a ledger row is appended and the request is closed as approved.

        Raises:
            NotFoundException: Request, original session, tutor or contract missing
            BusinessRuleException: Request not pending, session final, user not a tutor, tutor busy
            ValidationException: Tutor is not on the contract's roster
            ContractLockedException: Another change to the contract is in flight
        """
        request = self.request_repository.get_by_id(request_id, load_relationships=False)
        if not request:
            raise NotFoundException("Reschedule request not found.")

        contract_id = request.contract_id
        with exclusive_contract(contract_id):
            with self.transaction():
                request = self.request_repository.get_for_update(request_id)
                if not request:
                    raise NotFoundException("Reschedule request not found.")

                if not request.is_pending:
                    raise BusinessRuleException(
                        "Only pending requests can be approved.",
                        code="REQUEST_NOT_PENDING",
                        details={"status": request.status},
                    )

                original = self.session_repository.get_for_update(request.booking_id)
                if original is None:
                    raise NotFoundException("Session not found.")

                if original.is_terminal:
                    raise BusinessRuleException(
                        f"Cannot reschedule a session with status '{original.status}'. "
                        "Sessions that are completed or cancelled cannot be modified.",
                        code="SESSION_FINAL",
                        details={"booking_id": original.id},
                    )

                contract = self.contract_repository.get_for_update(contract_id)
                if contract is None:
                    raise NotFoundException("Contract not found.")

                tutor_id = self._resolve_tutor(data.new_tutor_id, original)
                if tutor_id not in contract.assigned_tutor_ids:
                    raise ValidationException(
                        "The selected tutor is not assigned to this contract. "
                        "Only the main tutor or substitute tutors can be assigned to sessions.",
                        code="TUTOR_NOT_ON_CONTRACT",
                        details={"contract_id": contract.id, "tutor_id": tutor_id},
                    )

                # The original session is vacated by this same approval
                if not self.availability_service.is_tutor_available(
                    tutor_id,
                    request.requested_date,
                    request.start_time,
                    request.end_time,
                    exclude_session_id=original.id,
                ):
                    raise TutorUnavailableException(
                        "Selected tutor is not available at the requested time.",
                        details={
                            "tutor_id": tutor_id,
                            "requested_date": request.requested_date.isoformat(),
                        },
                    )

                new_session = self.session_repository.add(
                    TutoringSession(
                        contract_id=contract_id,
                        tutor_id=tutor_id,
                        session_date=request.requested_date,
                        start_time=request.start_time,
                        end_time=request.end_time,
                        status=SessionStatus.SCHEDULED.value,
                        is_online=original.is_online,
                        video_call_platform=original.video_call_platform,
                        offline_address=original.offline_address,
                        rescheduled_from_session_id=original.id,
                    )
                )
                original.set_status(SessionStatus.RESCHEDULED)

                self.quota_service.consume(contract, request, original, new_session, staff_id)
                request.approve(staff_id, tutor_id, data.note)
                self.request_repository.flush()

        prometheus_metrics.record_reschedule_decision("approved")
        self.log_operation(
            "approve_reschedule_request",
            request_id=request.id,
            contract_id=contract_id,
            staff_id=staff_id,
            new_session_id=new_session.id,
            reschedule_count=contract.reschedule_count,
        )
        return RescheduleResponse(
            request_id=request.id,
            status=RescheduleRequestStatus.APPROVED,
            message="Request approved successfully.",
            processed_at=request.processed_at,
            new_session_id=new_session.id,
            reschedule_count=contract.reschedule_count,
        )

    def _resolve_tutor(self, new_tutor_id: Optional[str], original: TutoringSession) -> str:
        """Staff's pick when given (must be a tutor), else the original session's tutor."""
        if not new_tutor_id:
            return original.tutor_id

        tutor = self.user_repository.get_by_id(new_tutor_id)
        if tutor is None:
            raise NotFoundException("Tutor not found.")
        if not tutor.is_tutor:
            raise BusinessRuleException(
                "Selected user is not a tutor.",
                code="NOT_A_TUTOR",
                details={"user_id": new_tutor_id},
            )
        return tutor.id

    # Reject

    @BaseService.measure_operation("reject_reschedule_request")
    def reject_request(self, staff_id: str, request_id: str, reason: str) -> RescheduleResponse:
        """Close a pending request as rejected. No session or quota changes."""
        request = self.request_repository.get_by_id(request_id, load_relationships=False)
        if not request:
            raise NotFoundException("Reschedule request not found.")

        with exclusive_contract(request.contract_id):
            with self.transaction():
                request = self.request_repository.get_for_update(request_id)
                if not request:
                    raise NotFoundException("Reschedule request not found.")

                if not request.is_pending:
                    raise BusinessRuleException(
                        "Only pending requests can be rejected.",
                        code="REQUEST_NOT_PENDING",
                        details={"status": request.status},
                    )

                request.reject(staff_id, reason)
                self.request_repository.flush()

        prometheus_metrics.record_reschedule_decision("rejected")
        self.log_operation(
            "reject_reschedule_request",
            request_id=request.id,
            contract_id=request.contract_id,
            staff_id=staff_id,
        )
        return RescheduleResponse(
            request_id=request.id,
            status=RescheduleRequestStatus.REJECTED,
            message=f"Request rejected: {reason}",
            processed_at=request.processed_at,
        )

    # Reads

    @BaseService.measure_operation("get_reschedule_request")
    def get_request(self, request_id: str, user_id: str, role: RoleName) -> RescheduleRequest:
        """
        Fetch one request with its original session.

        Parents may read their own requests; tutors those touching sessions
        they teach or were proposed for; staff and admins any.
        """
        request = self.request_repository.get_with_details(request_id)
        if not request:
            raise NotFoundException("Reschedule request not found.")

        if role == RoleName.PARENT and request.parent_id != user_id:
            raise ForbiddenException("You can only view your own reschedule requests.")

        if role == RoleName.TUTOR:
            original_tutor = request.booking.tutor_id if request.booking else None
            if user_id not in (original_tutor, request.requested_tutor_id):
                raise ForbiddenException("You can only view requests for your sessions.")

        return request

    @BaseService.measure_operation("list_reschedule_requests")
    def list_requests(
        self,
        parent_id: Optional[str] = None,
        status: Optional[RescheduleRequestStatus] = None,
    ) -> List[RescheduleRequest]:
        return self.request_repository.list_requests(parent_id=parent_id, status=status)

    @BaseService.measure_operation("list_reschedule_requests_for_tutor")
    def list_requests_for_tutor(self, tutor_id: str) -> List[RescheduleRequest]:
        return self.request_repository.list_for_tutor(tutor_id)

    @BaseService.measure_operation("get_available_sub_tutors")
    def get_available_sub_tutors(self, request_id: str) -> Dict[str, Any]:
        """
        Contract substitutes that could take the requested window.

        Banned substitutes are skipped; the original session does not count
        against a substitute who happens to teach it.
        """
        request = self.request_repository.get_by_id(request_id, load_relationships=False)
        if not request:
            raise NotFoundException("Reschedule request not found.")

        contract = self.contract_repository.get_by_id(request.contract_id, load_relationships=False)
        if contract is None:
            raise NotFoundException("Contract not found.")

        available: List[Dict[str, Any]] = []
        for tutor in self.user_repository.get_many(contract.substitute_tutor_ids):
            if tutor.is_banned:
                continue
            if self.availability_service.is_tutor_available(
                tutor.id,
                request.requested_date,
                request.start_time,
                request.end_time,
                exclude_session_id=request.booking_id,
            ):
                available.append(
                    {
                        "tutor_id": tutor.id,
                        "full_name": tutor.full_name,
                        "email": tutor.email,
                        "phone": tutor.phone,
                        "is_available": True,
                    }
                )

        return {
            "request_id": request.id,
            "requested_date": request.requested_date,
            "start_time": request.start_time,
            "end_time": request.end_time,
            "available_tutors": available,
            "total_available": len(available),
        }
