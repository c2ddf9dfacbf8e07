"""
Reservation Service

Maintains the per-item waiting queue for items with no free copy and hands
a freed copy to the earliest waiting user.

Reservation states: ACTIVE -> FULFILLED | CANCELLED | EXPIRED. The three
outcomes are terminal; every transition goes through
ReservationStatus.can_transition_to.
"""

from datetime import date, datetime, timedelta
from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from config.lending_config import LendingPolicy, settings
from constants import BusinessErrorCode
from database import transaction
from domain.value_objects import ReservationStatus
from exceptions import BusinessError
from models import Loan, Reservation
from repositories import MediaItemRepository, ReservationRepository, UserRepository
from utils.logging_utils import log_operation
from .interfaces import ILibraryService, IReservationService
from .request_validator import RequestValidator

logger = logging.getLogger(__name__)


class ReservationService(IReservationService):
    """Service for the FIFO reservation queue."""

    def __init__(
        self,
        db: Session,
        policy: Optional[LendingPolicy] = None,
        library_service: Optional[ILibraryService] = None,
    ):
        """
        Initialize ReservationService.

        Args:
            db: Database session
            policy: Lending policy (defaults to the configured one)
            library_service: Service used to turn a promoted reservation into
                a loan; a LibraryService sharing this session is created on
                first use if omitted
        """
        self.db = db
        self.policy = policy or settings.policy
        self.reservation_repo = ReservationRepository(db)
        self.user_repo = UserRepository(db)
        self.item_repo = MediaItemRepository(db)
        self._library_service = library_service

    @property
    def library_service(self) -> ILibraryService:
        if self._library_service is None:
            from .library_service import LibraryService
            self._library_service = LibraryService(self.db, policy=self.policy, reservation_service=self)
        return self._library_service

    @property
    def hold_window(self) -> timedelta:
        return timedelta(hours=self.policy.reservation_window_hours)

    def _transition(self, reservation: Reservation, new_status: ReservationStatus) -> Reservation:
        current = ReservationStatus.from_string(reservation.status)
        if not current.can_transition_to(new_status):
            raise BusinessError(
                BusinessErrorCode.RESERVATION_NOT_ACTIVE,
                f"Reservation {reservation.id} is {current.value} and cannot become {new_status.value}",
                reservation_id=reservation.id,
            )
        reservation.status = new_status.value
        return self.reservation_repo.update(reservation)

    @log_operation("reserve")
    def reserve(self, user_id: int, item_id: int, as_of: Optional[datetime] = None) -> Reservation:
        """
        Add a user to the waiting queue for an item.

        Duplicate ACTIVE reservations for the same user and item are accepted.

        Args:
            user_id: Waiting user
            item_id: Wanted item
            as_of: Reservation timestamp (defaults to now)

        Returns:
            The new ACTIVE reservation, held until as_of + hold window

        Raises:
            BusinessError: USER_NOT_FOUND or ITEM_NOT_FOUND
        """
        reserved_at = RequestValidator.as_datetime(as_of)

        with transaction(self.db):
            if self.user_repo.find_by_id(user_id) is None:
                raise BusinessError(BusinessErrorCode.USER_NOT_FOUND, user_id=user_id)
            if self.item_repo.find_by_id(item_id) is None:
                raise BusinessError(BusinessErrorCode.ITEM_NOT_FOUND, item_id=item_id)

            reservation = self.reservation_repo.save(Reservation(
                user_id=user_id,
                item_id=item_id,
                reservation_date=reserved_at,
                expiry_date=reserved_at + self.hold_window,
                status=ReservationStatus.ACTIVE.value,
            ))

        logger.info(
            f"User {user_id} reserved item {item_id} "
            f"(reservation {reservation.id}, queue position {self.count_active_by_item_id(item_id)})"
        )
        return reservation

    def get_reservation(self, reservation_id: int) -> Optional[Reservation]:
        return self.reservation_repo.find_by_id(reservation_id)

    def get_user_reservations(self, user_id: int, active_only: bool = False) -> List[Reservation]:
        if active_only:
            return self.reservation_repo.find_active_by_user_id(user_id)
        return self.reservation_repo.find_by_user_id(user_id)

    def find_active_by_item_id(self, item_id: int) -> List[Reservation]:
        return self.reservation_repo.find_active_by_item_id(item_id)

    def count_active_by_item_id(self, item_id: int) -> int:
        return self.reservation_repo.count_active_by_item_id(item_id)

    @log_operation("promote_reservation")
    def promote(self, item_id: int, as_of: Optional[date] = None) -> Optional[Loan]:
        """
        Give a free copy of an item to the head of its queue.

        Does nothing unless the queue is non-empty and the item has a copy on
        the shelf; at most one reservation is promoted per call.

        Args:
            item_id: Item whose copy was freed
            as_of: Loan date for the promoted loan (defaults to today)

        Returns:
            The loan created for the promoted user, or None
        """
        with transaction(self.db):
            item = self.item_repo.find_by_id(item_id)
            if item is None or not item.has_available_copy:
                return None

            head = self.reservation_repo.find_queue_head(item_id)
            if head is None:
                return None

            self._transition(head, ReservationStatus.FULFILLED)
            loan = self.library_service.borrow_item(head.user_id, item_id, as_of)

        logger.info(f"Promoted reservation {head.id} for item {item_id} to loan {loan.id}")
        return loan

    @log_operation("expire_reservations")
    def expire_reservations(self, as_of: Optional[datetime] = None) -> int:
        """
        Expire ACTIVE reservations whose hold window closed before as_of.

        Safe to run repeatedly: terminal reservations are never selected.

        Returns:
            Number of reservations expired by this call
        """
        cutoff = RequestValidator.as_datetime(as_of)

        with transaction(self.db):
            expired = self.reservation_repo.find_expired_reservations(cutoff)
            for reservation in expired:
                self._transition(reservation, ReservationStatus.EXPIRED)

        if expired:
            logger.info(f"Expired {len(expired)} reservation(s) past {cutoff.isoformat()}")
        return len(expired)

    @log_operation("cancel_reservation")
    def cancel(self, reservation_id: int) -> Reservation:
        """
        Withdraw an ACTIVE reservation from the queue.

        Raises:
            BusinessError: RESERVATION_NOT_FOUND or RESERVATION_NOT_ACTIVE
        """
        with transaction(self.db):
            reservation = self.reservation_repo.find_by_id(reservation_id)
            if reservation is None:
                raise BusinessError(BusinessErrorCode.RESERVATION_NOT_FOUND, reservation_id=reservation_id)
            self._transition(reservation, ReservationStatus.CANCELLED)

        return reservation
