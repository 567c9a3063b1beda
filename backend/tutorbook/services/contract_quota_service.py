"""
Contract quota tracking.

``Contract.reschedule_count`` is the number of reschedules a contract has
left. Requests are admitted only while it is positive; each approval
decrements it once and appends a ledger row recording the before and after
values. Nothing else writes the counter.
"""

from datetime import date
import logging
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import (
    BusinessRuleException,
    NotFoundException,
    RescheduleQuotaExhaustedException,
)
from ..models.contract import Contract
from ..models.reschedule_ledger import RescheduleLedgerEntry
from ..models.reschedule_request import RescheduleRequest
from ..models.session import TutoringSession
from ..repositories.factory import RepositoryFactory
from .base import BaseService

if TYPE_CHECKING:
    from ..repositories.contract_repository import ContractRepository
    from ..repositories.reschedule_ledger_repository import RescheduleLedgerRepository

logger = logging.getLogger(__name__)


class ContractQuotaService(BaseService):
    """Admission checks and consumption of a contract's reschedule quota."""

    def __init__(
        self,
        db: Session,
        contract_repository: Optional["ContractRepository"] = None,
        ledger_repository: Optional["RescheduleLedgerRepository"] = None,
    ):
        super().__init__(db)
        self.contract_repository = (
            contract_repository or RepositoryFactory.create_contract_repository(db)
        )
        self.ledger_repository = (
            ledger_repository or RepositoryFactory.create_reschedule_ledger_repository(db)
        )

    def ensure_can_request(self, contract: Contract, requested_date: date) -> None:
        """
        Admit a new reschedule request against the contract.

        Raises:
            RescheduleQuotaExhaustedException: No reschedules left
            BusinessRuleException: Requested date is after the contract ends
        """
        remaining = contract.reschedule_count or 0
        if remaining <= 0:
            raise RescheduleQuotaExhaustedException(contract.id, remaining)

        if requested_date > contract.end_date:
            raise BusinessRuleException(
                "Requested date exceeds contract end date.",
                code="REQUESTED_DATE_AFTER_CONTRACT_END",
                details={
                    "contract_id": contract.id,
                    "requested_date": requested_date.isoformat(),
                    "end_date": contract.end_date.isoformat(),
                },
            )

    def consume(
        self,
        contract: Contract,
        request: RescheduleRequest,
        original_session: TutoringSession,
        new_session: TutoringSession,
        staff_id: str,
    ) -> RescheduleLedgerEntry:
        """
        Decrement the quota for an approved request and record it.

        Must run inside the caller's transaction with ``contract`` row-locked.
        The decrement is not clamped at zero.
        """
        count_before = contract.reschedule_count or 0
        contract.reschedule_count = count_before - 1

        entry = self.ledger_repository.add(
            RescheduleLedgerEntry(
                contract_id=contract.id,
                request_id=request.id,
                original_session_id=original_session.id,
                new_session_id=new_session.id,
                staff_id=staff_id,
                count_before=count_before,
                count_after=contract.reschedule_count,
            )
        )
        if contract.reschedule_count < 0:
            self.logger.warning(
                f"Contract {contract.id} reschedule count went negative "
                f"({count_before} -> {contract.reschedule_count})"
            )
        return entry

    @BaseService.measure_operation("get_ledger")
    def get_ledger(self, contract_id: str) -> List[RescheduleLedgerEntry]:
        """Approved-reschedule history of a contract, oldest first."""
        if not self.contract_repository.exists(id=contract_id):
            raise NotFoundException("Contract not found.")
        return self.ledger_repository.list_for_contract(contract_id)
