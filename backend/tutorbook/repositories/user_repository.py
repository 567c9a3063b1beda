"""
User Repository for the tutoring platform.

Read-only lookups the session engine needs: single users and the pool of
active tutors used for replacement suggestions.
"""

import logging
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.enums import RoleName, UserStatus
from ..core.exceptions import RepositoryException
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for user lookups."""

    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_many(self, user_ids: Sequence[str]) -> List[User]:
        """Fetch users by id, preserving the order of ``user_ids``."""
        ids = [uid for uid in user_ids if uid]
        if not ids:
            return []
        users = self._execute_query(self.db.query(User).filter(User.id.in_(ids)))
        by_id = {user.id: user for user in users}
        return [by_id[uid] for uid in ids if uid in by_id]

    def list_active_tutors(self, exclude_ids: Optional[Sequence[str]] = None) -> List[User]:
        """
        Active tutors ordered by name.

        Args:
            exclude_ids: Tutor ids to leave out of the result

        Returns:
            List of active tutor users
        """
        try:
            query = self.db.query(User).filter(
                User.role == RoleName.TUTOR.value,
                User.status == UserStatus.ACTIVE.value,
            )
            excluded = [uid for uid in (exclude_ids or []) if uid]
            if excluded:
                query = query.filter(User.id.notin_(excluded))
            return query.order_by(User.full_name, User.id).all()
        except Exception as e:
            self.logger.error(f"Error listing active tutors: {str(e)}")
            raise RepositoryException(f"Failed to list tutors: {str(e)}")
