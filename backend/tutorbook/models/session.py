# backend/tutorbook/models/session.py
"""
Tutoring session (booking) model.

Each row is one scheduled occurrence under a contract. Sessions store their
own tutor, date and window so they survive later changes to the contract's
tutor roster. A session created by an approved reschedule points back at the
session it replaced.
"""

from datetime import date, datetime, timezone
import logging
import os
from typing import Any, Optional, cast

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    Time,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.enums import SessionStatus
from ..database import Base

logger = logging.getLogger(__name__)

IS_SQLITE = os.getenv("DB_DIALECT", "").lower().startswith("sqlite")


class TutoringSession(Base):
    """One tutoring occurrence tied to a contract."""

    __tablename__ = "sessions"

    # Primary key (the booking id)
    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    contract_id = Column(String(26), ForeignKey("contracts.id"), nullable=False, index=True)
    tutor_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)

    session_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    status = Column(String(20), nullable=False, default=SessionStatus.SCHEDULED.value, index=True)

    is_online = Column(Boolean, nullable=False, default=True)
    video_call_platform = Column(String(50), nullable=True)
    offline_address = Column(Text, nullable=True)

    # Optional linkage when created by reschedule
    rescheduled_from_session_id = Column(String(26), ForeignKey("sessions.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True)

    contract = relationship("Contract", back_populates="sessions")
    tutor = relationship("User", foreign_keys=[tutor_id])
    rescheduled_from = relationship("TutoringSession", remote_side=[id], uselist=False)

    _table_constraints = [
        CheckConstraint(
            "status IN ('scheduled', 'processing', 'completed', 'cancelled', 'rescheduled')",
            name="ck_sessions_status",
        ),
    ]

    if not IS_SQLITE:
        _table_constraints.append(
            CheckConstraint("start_time < end_time", name="ck_sessions_time_order")
        )

    __table_args__ = tuple(_table_constraints)

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if not self.status:
            self.status = SessionStatus.SCHEDULED.value

    def __repr__(self) -> str:
        return (
            f"<TutoringSession {self.id}: contract={self.contract_id} tutor={self.tutor_id} "
            f"date={self.session_date} time={self.start_time}-{self.end_time} status={self.status}>"
        )

    @property
    def status_enum(self) -> Optional[SessionStatus]:
        return SessionStatus.parse(cast(str, self.status))

    @property
    def is_terminal(self) -> bool:
        """Completed and cancelled sessions accept no further changes."""
        current = self.status_enum
        return current is not None and current.is_terminal

    def is_past(self, today: date) -> bool:
        return cast(date, self.session_date) < today

    def set_status(self, status: SessionStatus) -> None:
        """Overwrite the status; a same-status write still counts as a modification."""
        previous = self.status
        self.status = status.value
        self.touch()
        logger.info(f"Session {self.id} status {previous} -> {status.value}")

    def assign_tutor(self, tutor_id: str) -> None:
        previous = self.tutor_id
        self.tutor_id = tutor_id
        self.touch()
        logger.info(f"Session {self.id} tutor {previous} -> {tutor_id}")

    def touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)


Index(
    "ix_sessions_tutor_date_status",
    TutoringSession.tutor_id,
    TutoringSession.session_date,
    TutoringSession.status,
)
