"""
Fine repository.
"""

from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import func

from models import Fine as FineModel, Loan as LoanModel
from utils.error_handlers import translate_db_errors
from .base_repository import BaseRepository, is_valid_id


class FineRepository(BaseRepository[FineModel]):
    """Repository for Fine model operations."""

    def __init__(self, db: Session):
        super().__init__(db, FineModel)

    @translate_db_errors("find fine by loan")
    def find_by_loan_id(self, loan_id: Optional[int]) -> Optional[FineModel]:
        if not is_valid_id(loan_id):
            return None
        return self.db.query(self.model).filter(self.model.loan_id == loan_id).first()

    @translate_db_errors("find fines by user")
    def find_by_user_id(self, user_id: Optional[int], unpaid_only: bool = False) -> List[FineModel]:
        """
        Get fines raised on a user's loans.

        Args:
            user_id: User id
            unpaid_only: Skip fines already paid

        Returns:
            Fines, oldest first
        """
        if not is_valid_id(user_id):
            return []
        query = self.db.query(self.model).join(
            LoanModel, LoanModel.id == self.model.loan_id
        ).filter(LoanModel.user_id == user_id)
        if unpaid_only:
            query = query.filter(self.model.paid.is_(False))
        return query.order_by(self.model.created_at, self.model.id).all()

    @translate_db_errors("total unpaid fines")
    def total_unpaid_for_user(self, user_id: Optional[int]) -> Decimal:
        if not is_valid_id(user_id):
            return Decimal('0.00')
        total = self.db.query(
            func.coalesce(func.sum(self.model.amount), 0)
        ).select_from(self.model).join(
            LoanModel, LoanModel.id == self.model.loan_id
        ).filter(
            LoanModel.user_id == user_id,
            self.model.paid.is_(False)
        ).scalar()
        return Decimal(str(total)).quantize(Decimal('0.01'))
