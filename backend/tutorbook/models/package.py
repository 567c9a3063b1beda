"""Package catalog entry referenced by contracts."""

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Numeric, String, text
from sqlalchemy.sql import func
import ulid

from ..core.constants import SLOT_DURATION_MINUTES
from ..database import Base


class Package(Base):
    """
    A purchasable bundle of sessions.

    The engine only reads the scheduling knobs: how many reschedules a
    contract starts with and how long each slot lasts.
    """

    __tablename__ = "packages"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name = Column(String(255), nullable=False)
    session_count = Column(Integer, nullable=False)
    max_reschedule = Column(Integer, nullable=False, default=0, server_default=text("0"))
    slot_duration_minutes = Column(
        Integer,
        nullable=False,
        default=SLOT_DURATION_MINUTES,
        server_default=text(str(SLOT_DURATION_MINUTES)),
    )
    price = Column(Numeric(12, 2), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("session_count > 0", name="ck_packages_session_count_positive"),
        CheckConstraint("max_reschedule >= 0", name="ck_packages_max_reschedule_non_negative"),
        CheckConstraint("price >= 0", name="ck_packages_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Package {self.id}: {self.name} max_reschedule={self.max_reschedule}>"
