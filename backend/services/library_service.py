"""
Library Service

Handles the lending rules: catalogue maintenance, borrowing, returning,
fines and the hand-off to the reservation queue when a copy comes back.

Every multi-step write runs inside database.transaction so that a failure
part way leaves nothing behind (e.g. no decremented copy count without the
loan that explains it).
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from config.lending_config import LendingPolicy, settings
from constants import BusinessErrorCode
from database import transaction
from domain.value_objects import LoanStatus
from dtos.internal import ReturnResult
from dtos.request import MediaItemRequest
from exceptions import BusinessError, DataAccessError
from models import Fine, Loan, MediaItem
from repositories import (
    FineRepository,
    LoanRepository,
    MediaItemRepository,
    UserRepository,
)
from utils.logging_utils import log_operation
from .fine_calculator import FineCalculator
from .interfaces import ILibraryService, IReservationService
from .request_validator import RequestValidator

logger = logging.getLogger(__name__)

# Fields copied from a validated request back onto the entity
_ITEM_FIELDS = (
    'title', 'author', 'media_type', 'isbn', 'publication_date',
    'publisher', 'total_copies', 'late_fees_per_day',
)


class LibraryService(ILibraryService):
    """Service for borrowing, returning and catalogue operations."""

    def __init__(
        self,
        db: Session,
        policy: Optional[LendingPolicy] = None,
        fine_calculator: Optional[FineCalculator] = None,
        reservation_service: Optional[IReservationService] = None,
    ):
        """
        Initialize LibraryService.

        Args:
            db: Database session
            policy: Lending policy (defaults to the configured one)
            fine_calculator: Late fee calculator
            reservation_service: Queue to promote after returns; a
                ReservationService sharing this session is created if omitted
        """
        self.db = db
        self.policy = policy or settings.policy
        self.fine_calculator = fine_calculator or FineCalculator()
        self.user_repo = UserRepository(db)
        self.item_repo = MediaItemRepository(db)
        self.loan_repo = LoanRepository(db)
        self.fine_repo = FineRepository(db)

        if reservation_service is None:
            from .reservation_service import ReservationService
            reservation_service = ReservationService(db, policy=self.policy, library_service=self)
        self.reservation_service = reservation_service

    # ------------------------------------------------------------------
    # Catalogue
    # ------------------------------------------------------------------

    @staticmethod
    def _apply_request(target: MediaItem, request: MediaItemRequest) -> MediaItem:
        for field in _ITEM_FIELDS:
            setattr(target, field, getattr(request, field))
        return target

    def add_media_item(self, item: Optional[MediaItem]) -> MediaItem:
        request = RequestValidator.validate(MediaItemRequest, item, "Media item")
        item = self._apply_request(item, request)
        if request.available_copies is None:
            item.available_copies = request.total_copies

        with transaction(self.db):
            saved = self.item_repo.save(item)

        logger.info(f"Added media item {saved.id} ({saved.media_type}: {saved.title})")
        return saved

    def update_media_item(self, item: Optional[MediaItem]) -> MediaItem:
        """
        Apply catalogue changes to a stored item.

        The stored available_copies is kept unless the caller sets one, so
        copies out on loan stay accounted for.

        Raises:
            ValidationError: If item is None or a field is invalid
            DataAccessError: If the item does not exist
        """
        request = RequestValidator.validate(MediaItemRequest, item, "Media item")

        with transaction(self.db):
            stored = self.item_repo.find_by_id_for_update(request.id)
            if stored is None:
                raise DataAccessError("update", f"MediaItem {request.id} does not exist")

            self._apply_request(stored, request)
            if request.available_copies is not None:
                stored.available_copies = request.available_copies
            updated = self.item_repo.update(stored)

        logger.info(f"Updated media item {updated.id}")
        return updated

    def delete_media_item(self, item_id: int) -> bool:
        """
        Delete an item; its loans, fines and reservations go with it.

        Returns:
            True if deleted, False if no such item
        """
        with transaction(self.db):
            deleted = self.item_repo.delete_by_id(item_id)

        if deleted:
            logger.info(f"Deleted media item {item_id}")
        return deleted

    def get_media_item(self, item_id: int) -> Optional[MediaItem]:
        return self.item_repo.find_by_id(item_id)

    def search_media_items(self, keyword: Optional[str]) -> List[MediaItem]:
        return self.item_repo.search(keyword)

    def find_by_type(self, media_type: Optional[str]) -> List[MediaItem]:
        return self.item_repo.find_by_type(media_type)

    def find_by_title_containing(self, text: Optional[str]) -> List[MediaItem]:
        return self.item_repo.find_by_title_containing(text)

    def find_by_author_containing(self, text: Optional[str]) -> List[MediaItem]:
        return self.item_repo.find_by_author_containing(text)

    # ------------------------------------------------------------------
    # Circulation
    # ------------------------------------------------------------------

    def loan_period_for(self, item: MediaItem) -> int:
        """Loan period in days for an item's type; unknown types get the default."""
        return self.policy.loan_period_days(item.media_type)

    @log_operation("borrow_item")
    def borrow_item(self, user_id: int, item_id: int, as_of: Optional[date] = None) -> Loan:
        """
        Lend one copy of an item to a user.

        Args:
            user_id: Borrowing user
            item_id: Item to lend
            as_of: Loan date (defaults to today)

        Returns:
            The new ACTIVE loan

        Raises:
            BusinessError: USER_NOT_FOUND, ITEM_NOT_FOUND or NO_COPIES_AVAILABLE
        """
        loan_date = RequestValidator.as_date(as_of)

        with transaction(self.db):
            if self.user_repo.find_by_id(user_id) is None:
                raise BusinessError(BusinessErrorCode.USER_NOT_FOUND, user_id=user_id)

            item = self.item_repo.find_by_id_for_update(item_id)
            if item is None:
                raise BusinessError(BusinessErrorCode.ITEM_NOT_FOUND, item_id=item_id)

            if not item.has_available_copy:
                raise BusinessError(
                    BusinessErrorCode.NO_COPIES_AVAILABLE,
                    f"No copies of '{item.title}' are available",
                    item_id=item_id,
                )

            period = self.loan_period_for(item)
            loan = Loan(
                user_id=user_id,
                item_id=item.id,
                loan_date=loan_date,
                due_date=loan_date + timedelta(days=period),
                status=LoanStatus.ACTIVE.value,
            )

            # Lost the race for the last copy between the read and the write
            if not self.item_repo.decrement_if_available(item.id):
                raise BusinessError(BusinessErrorCode.NO_COPIES_AVAILABLE, item_id=item_id)

            self.loan_repo.save(loan)

        logger.info(
            f"User {user_id} borrowed item {item_id} "
            f"(loan {loan.id}, {period} days, due {loan.due_date.isoformat()})"
        )
        return loan

    @log_operation("return_item")
    def return_item(self, loan_id: int, as_of: Optional[date] = None) -> ReturnResult:
        """
        Close a loan and release its copy.

        Marks the loan RETURNED, puts the copy back, records a fine if the
        loan was late and offers the copy to the head of the reservation
        queue. All of it commits together or not at all.

        Args:
            loan_id: Loan to close
            as_of: Return date (defaults to today)

        Returns:
            ReturnResult with the loan, any fine and any promoted loan

        Raises:
            BusinessError: LOAN_NOT_FOUND, LOAN_ALREADY_RETURNED or ITEM_NOT_FOUND
        """
        return_date = RequestValidator.as_date(as_of)

        with transaction(self.db):
            loan = self.loan_repo.find_by_id(loan_id)
            if loan is None:
                raise BusinessError(BusinessErrorCode.LOAN_NOT_FOUND, loan_id=loan_id)

            if not LoanStatus.from_string(loan.status).can_transition_to(LoanStatus.RETURNED):
                raise BusinessError(BusinessErrorCode.LOAN_ALREADY_RETURNED, loan_id=loan_id)

            item = self.item_repo.find_by_id_for_update(loan.item_id)
            if item is None:
                raise BusinessError(
                    BusinessErrorCode.ITEM_NOT_FOUND,
                    f"Item {loan.item_id} for loan {loan_id} no longer exists",
                    loan_id=loan_id,
                    item_id=loan.item_id,
                )

            loan.status = LoanStatus.RETURNED.value
            loan.return_date = return_date
            self.loan_repo.update(loan)

            self.item_repo.update_available_copies(item.id, 1, relative=True)

            fine = None
            amount = self.fine_calculator.calculate_for_loan(loan, item, return_date)
            if amount > 0:
                fine = self.fine_repo.save(Fine(loan_id=loan.id, amount=amount, paid=False))
                logger.info(f"Loan {loan_id} returned {(return_date - loan.due_date).days} day(s) late, fined {amount}")

            promoted = self.reservation_service.promote(item.id, as_of=return_date)

        return ReturnResult(loan=loan, fine=fine, promoted_loan=promoted)

    # ------------------------------------------------------------------
    # Loans and fines
    # ------------------------------------------------------------------

    def get_user_loans(self, user_id: int, active_only: bool = False) -> List[Loan]:
        if active_only:
            return self.loan_repo.find_active_by_user_id(user_id)
        return self.loan_repo.find_by_user_id(user_id)

    def get_overdue_loans(self, as_of: Optional[date] = None) -> List[Loan]:
        return self.loan_repo.find_overdue(RequestValidator.as_date(as_of))

    def get_accrued_fine(self, loan_id: int, as_of: Optional[date] = None) -> Decimal:
        """
        Fine a loan would carry if it were settled on as_of.

        Unknown loans accrue nothing.
        """
        loan = self.loan_repo.find_by_id(loan_id)
        if loan is None or loan.item is None:
            return Decimal('0.00')
        return self.fine_calculator.calculate_for_loan(loan, loan.item, RequestValidator.as_date(as_of))

    def get_fines_for_user(self, user_id: int, unpaid_only: bool = True) -> List[Fine]:
        return self.fine_repo.find_by_user_id(user_id, unpaid_only=unpaid_only)

    def get_outstanding_balance(self, user_id: int) -> Decimal:
        return self.fine_repo.total_unpaid_for_user(user_id)

    @log_operation("pay_fine")
    def pay_fine(self, fine_id: int, when: Optional[datetime] = None) -> Fine:
        with transaction(self.db):
            fine = self.fine_repo.find_by_id(fine_id)
            if fine is None:
                raise BusinessError(BusinessErrorCode.FINE_NOT_FOUND, fine_id=fine_id)
            if fine.paid:
                raise BusinessError(BusinessErrorCode.FINE_ALREADY_PAID, fine_id=fine_id)

            fine.paid = True
            fine.paid_at = RequestValidator.as_datetime(when)
            self.fine_repo.update(fine)

        return fine

    def delete_user(self, user_id: int) -> bool:
        """
        Delete a user; their loans, fines and reservations go with them.

        Returns:
            True if deleted, False if no such user
        """
        with transaction(self.db):
            deleted = self.user_repo.delete_by_id(user_id)

        if deleted:
            logger.info(f"Deleted user {user_id}")
        return deleted
