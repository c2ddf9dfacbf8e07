"""
User repository for account lookups and uniqueness checks.
"""

from typing import Optional
from sqlalchemy.orm import Session

from models import User as UserModel
from utils.error_handlers import translate_db_errors
from .base_repository import BaseRepository


class UserRepository(BaseRepository[UserModel]):
    """Repository for User model operations.

    delete_by_id removes the user's loans and reservations through the
    store's ON DELETE CASCADE foreign keys.
    """

    def __init__(self, db: Session):
        super().__init__(db, UserModel)

    @translate_db_errors("find user by username")
    def find_by_username(self, username: Optional[str]) -> Optional[UserModel]:
        if not username:
            return None
        return self.db.query(self.model).filter(self.model.username == username).first()

    @translate_db_errors("find user by email")
    def find_by_email(self, email: Optional[str]) -> Optional[UserModel]:
        if not email:
            return None
        return self.db.query(self.model).filter(self.model.email == email).first()

    @translate_db_errors("check username exists")
    def exists_by_username(self, username: Optional[str]) -> bool:
        if not username:
            return False
        return self.db.query(self.model.id).filter(self.model.username == username).first() is not None

    @translate_db_errors("check email exists")
    def exists_by_email(self, email: Optional[str]) -> bool:
        if not email:
            return False
        return self.db.query(self.model.id).filter(self.model.email == email).first() is not None
