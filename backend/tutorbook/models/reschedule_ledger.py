"""Append-only history of approved reschedules per contract."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class RescheduleLedgerEntry(Base):
    """
    One row per approved reschedule.

    ``count_before``/``count_after`` snapshot the contract's remaining quota
    around the decrement, so the counter can be audited even when it goes
    below zero.
    """

    __tablename__ = "reschedule_ledger"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    contract_id = Column(String(26), ForeignKey("contracts.id"), nullable=False, index=True)
    request_id = Column(
        String(26), ForeignKey("reschedule_requests.id"), nullable=False, unique=True
    )
    original_session_id = Column(String(26), ForeignKey("sessions.id"), nullable=False)
    new_session_id = Column(String(26), ForeignKey("sessions.id"), nullable=False)
    staff_id = Column(String(26), ForeignKey("users.id"), nullable=False)
    count_before = Column(Integer, nullable=False)
    count_after = Column(Integer, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        index=True,
    )

    contract = relationship("Contract")
    request = relationship("RescheduleRequest")

    def __repr__(self) -> str:
        return (
            f"<RescheduleLedgerEntry contract={self.contract_id} request={self.request_id} "
            f"{self.count_before}->{self.count_after}>"
        )
