"""Create the session engine's tables on the configured database."""

import logging

from .database import Base, engine
from .models import (  # noqa: F401  registers every table on Base.metadata
    Contract,
    Package,
    RescheduleLedgerEntry,
    RescheduleRequest,
    TutoringSession,
    User,
)

logger = logging.getLogger(__name__)


def init_db() -> None:
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Tables created successfully")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
