"""
User repository - Data access layer for user profiles.
"""
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from prayer_tracker.exceptions import StorageException
from prayer_tracker.models import UserProfile


class UserRepository:
    """Repository for UserProfile data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str) -> Optional[UserProfile]:
        return self.db.query(UserProfile).filter(UserProfile.id == user_id).first()

    def get_all(self) -> List[UserProfile]:
        return self.db.query(UserProfile).order_by(UserProfile.id).all()

    def get_by_ids(self, user_ids: Iterable[str]) -> List[UserProfile]:
        """Get the profiles among user_ids that exist (friends scope)"""
        ids = list(user_ids)
        if not ids:
            return []
        return self.db.query(UserProfile).filter(
            UserProfile.id.in_(ids)
        ).order_by(UserProfile.id).all()

    def create(self, user: UserProfile) -> UserProfile:
        """Create new user profile"""
        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageException("create_user", str(e))
        return user
