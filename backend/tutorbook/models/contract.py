# backend/tutorbook/models/contract.py
"""
Contract model.

A contract binds one parent to a package and to up to three tutors (main,
substitute 1, substitute 2). Its ``reschedule_count`` is the remaining
reschedule quota; only the approval path changes it.
"""

from __future__ import annotations

from typing import Any, List, Optional

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.enums import ContractStatus
from ..database import Base


class Contract(Base):
    """Agreement between a parent and the platform for a package of sessions."""

    __tablename__ = "contracts"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    parent_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    package_id = Column(String(26), ForeignKey("packages.id"), nullable=False)

    main_tutor_id = Column(String(26), ForeignKey("users.id"), nullable=False)
    substitute_tutor1_id = Column(String(26), ForeignKey("users.id"), nullable=True)
    substitute_tutor2_id = Column(String(26), ForeignKey("users.id"), nullable=True)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    is_online = Column(Boolean, nullable=False, default=True)
    video_call_platform = Column(String(50), nullable=True)
    offline_address = Column(Text, nullable=True)

    # Remaining reschedules. Seeded from package.max_reschedule; not clamped at zero.
    reschedule_count = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=ContractStatus.ACTIVE.value, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    parent = relationship("User", foreign_keys=[parent_id])
    package = relationship("Package")
    main_tutor = relationship("User", foreign_keys=[main_tutor_id])
    substitute_tutor1 = relationship("User", foreign_keys=[substitute_tutor1_id])
    substitute_tutor2 = relationship("User", foreign_keys=[substitute_tutor2_id])
    sessions = relationship("TutoringSession", back_populates="contract")

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if self.reschedule_count is None and self.package is not None:
            self.reschedule_count = self.package.max_reschedule

    def __repr__(self) -> str:
        return (
            f"<Contract {self.id}: parent={self.parent_id} "
            f"reschedules_left={self.reschedule_count} status={self.status}>"
        )

    @property
    def assigned_tutor_ids(self) -> List[str]:
        """Main tutor first, then substitutes; unset slots skipped."""
        candidates: List[Optional[str]] = [
            self.main_tutor_id,
            self.substitute_tutor1_id,
            self.substitute_tutor2_id,
        ]
        return [tutor_id for tutor_id in candidates if tutor_id]

    @property
    def substitute_tutor_ids(self) -> List[str]:
        return [tid for tid in (self.substitute_tutor1_id, self.substitute_tutor2_id) if tid]
