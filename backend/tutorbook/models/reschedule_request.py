"""Parent-initiated reschedule requests awaiting a staff decision."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    Time,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.constants import STAFF_NOTE_SEPARATOR
from ..core.enums import RescheduleRequestStatus
from ..database import Base


class RescheduleRequest(Base):
    """
    Proposal to move one session to a new date and slot.

    Created ``pending``; decided exactly once (``approved`` or ``rejected``)
    and immutable afterwards.
    """

    __tablename__ = "reschedule_requests"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    booking_id = Column(
        String(26),
        ForeignKey("sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    contract_id = Column(String(26), ForeignKey("contracts.id"), nullable=False, index=True)
    parent_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)

    requested_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    requested_tutor_id = Column(String(26), ForeignKey("users.id"), nullable=True)

    reason = Column(Text, nullable=True)
    status = Column(
        String(20),
        nullable=False,
        default=RescheduleRequestStatus.PENDING.value,
        server_default=text("'pending'"),
    )
    staff_id = Column(String(26), ForeignKey("users.id"), nullable=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    booking = relationship("TutoringSession", foreign_keys=[booking_id])
    contract = relationship("Contract", foreign_keys=[contract_id])
    parent = relationship("User", foreign_keys=[parent_id])
    requested_tutor = relationship("User", foreign_keys=[requested_tutor_id])
    staff = relationship("User", foreign_keys=[staff_id])

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_reschedule_requests_status",
        ),
        # At most one outstanding request per contract
        Index(
            "uq_reschedule_requests_contract_pending",
            "contract_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if not self.status:
            self.status = RescheduleRequestStatus.PENDING.value

    def __repr__(self) -> str:
        return (
            f"<RescheduleRequest {self.id}: booking={self.booking_id} "
            f"date={self.requested_date} start={self.start_time} status={self.status}>"
        )

    @property
    def is_pending(self) -> bool:
        return self.status == RescheduleRequestStatus.PENDING.value

    def approve(self, staff_id: str, tutor_id: str, note: Optional[str] = None) -> None:
        if note:
            self.reason = f"{self.reason or ''}{STAFF_NOTE_SEPARATOR}{note}"
        self.status = RescheduleRequestStatus.APPROVED.value
        self.staff_id = staff_id
        self.requested_tutor_id = tutor_id
        self.processed_at = datetime.now(timezone.utc)

    def reject(self, staff_id: str, reason: str) -> None:
        self.status = RescheduleRequestStatus.REJECTED.value
        self.staff_id = staff_id
        self.reason = reason
        self.processed_at = datetime.now(timezone.utc)
