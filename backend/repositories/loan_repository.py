"""
Loan repository for loan-specific data access operations.
"""

from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from domain.value_objects import LoanStatus
from models import Loan as LoanModel
from utils.error_handlers import translate_db_errors
from .base_repository import BaseRepository, is_valid_id


class LoanRepository(BaseRepository[LoanModel]):
    """Repository for Loan model operations."""

    def __init__(self, db: Session):
        super().__init__(db, LoanModel)

    @translate_db_errors("find loans by user")
    def find_by_user_id(self, user_id: Optional[int]) -> List[LoanModel]:
        """
        Get all loans for a user, newest first.

        Args:
            user_id: User id

        Returns:
            List of loans (empty for unknown or invalid ids)
        """
        if not is_valid_id(user_id):
            return []
        return self.db.query(self.model).filter(
            self.model.user_id == user_id
        ).order_by(self.model.loan_date.desc(), self.model.id.desc()).all()

    @translate_db_errors("find active loans by user")
    def find_active_by_user_id(self, user_id: Optional[int]) -> List[LoanModel]:
        if not is_valid_id(user_id):
            return []
        return self.db.query(self.model).filter(
            self.model.user_id == user_id,
            self.model.status == LoanStatus.ACTIVE.value
        ).order_by(self.model.due_date, self.model.id).all()

    @translate_db_errors("find loans by item")
    def find_by_item_id(self, item_id: Optional[int]) -> List[LoanModel]:
        if not is_valid_id(item_id):
            return []
        return self.db.query(self.model).filter(
            self.model.item_id == item_id
        ).order_by(self.model.loan_date.desc(), self.model.id.desc()).all()

    @translate_db_errors("find overdue loans")
    def find_overdue(self, as_of: date) -> List[LoanModel]:
        """
        Get active loans whose due date has passed.

        Args:
            as_of: Reference date; loans due strictly before it are overdue

        Returns:
            Overdue loans, most overdue first
        """
        return self.db.query(self.model).filter(
            self.model.status == LoanStatus.ACTIVE.value,
            self.model.due_date < as_of
        ).order_by(self.model.due_date, self.model.id).all()
