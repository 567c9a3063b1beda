"""
Contract Repository for the tutoring platform.

Contracts are read with their package for quota checks and locked
``FOR UPDATE`` on the approval path, where the remaining reschedule count
is decremented.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Query, Session, joinedload

from ..models.contract import Contract
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ContractRepository(BaseRepository[Contract]):
    """Repository for contract data access."""

    def __init__(self, db: Session):
        super().__init__(db, Contract)

    def get_with_package(self, contract_id: str) -> Optional[Contract]:
        """Load a contract with its package eagerly."""
        return self.get_by_id(contract_id, load_relationships=True)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(joinedload(Contract.package))
