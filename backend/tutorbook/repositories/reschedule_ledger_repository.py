"""Append-only access to the reschedule ledger."""

from typing import List

from sqlalchemy.orm import Session

from ..models.reschedule_ledger import RescheduleLedgerEntry
from .base_repository import BaseRepository


class RescheduleLedgerRepository(BaseRepository[RescheduleLedgerEntry]):
    def __init__(self, db: Session):
        super().__init__(db, RescheduleLedgerEntry)

    def list_for_contract(self, contract_id: str) -> List[RescheduleLedgerEntry]:
        """Ledger rows for a contract, oldest first."""
        query = (
            self.db.query(RescheduleLedgerEntry)
            .filter(RescheduleLedgerEntry.contract_id == contract_id)
            .order_by(RescheduleLedgerEntry.created_at, RescheduleLedgerEntry.id)
        )
        return self._execute_query(query)
