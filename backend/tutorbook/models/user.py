# backend/tutorbook/models/user.py
"""
User model for the tutoring platform.

Only the slice of the user record the session engine reads: identity,
contact fields shown in tutor suggestions, the role, and account status.
Authentication data lives with the identity provider.
"""

import logging

from sqlalchemy import CheckConstraint, Column, DateTime, String
from sqlalchemy.sql import func
import ulid

from ..core.enums import RoleName, UserStatus
from ..database import Base

logger = logging.getLogger(__name__)


class User(Base):
    """Parent, tutor, staff member or admin."""

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=True)
    avatar_url = Column(String(512), nullable=True)
    role = Column(String(20), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=UserStatus.ACTIVE.value)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(
            "role IN ('parent', 'tutor', 'staff', 'admin')",
            name="ck_users_role",
        ),
        CheckConstraint(
            "status IN ('active', 'inactive', 'banned')",
            name="ck_users_status",
        ),
    )

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.email} role={self.role}>"

    @property
    def is_tutor(self) -> bool:
        return self.role == RoleName.TUTOR.value

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value

    @property
    def is_banned(self) -> bool:
        return self.status == UserStatus.BANNED.value
