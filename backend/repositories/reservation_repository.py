"""
Reservation repository for the per-item waiting queue.
"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import func

from domain.value_objects import ReservationStatus
from models import Reservation as ReservationModel
from utils.error_handlers import translate_db_errors
from .base_repository import BaseRepository, is_valid_id


class ReservationRepository(BaseRepository[ReservationModel]):
    """
    Repository for Reservation model operations.

    Queue order is reservation_date ascending, then queue_order ascending,
    then id. queue_order is assigned here on save from a store-wide
    monotonic sequence, so ordering never depends on clock resolution or on
    the physical order rows come back in.
    """

    def __init__(self, db: Session):
        super().__init__(db, ReservationModel)

    def _queue_ordering(self):
        # id is unique and insertion-ordered; it settles queue_order ties left by
        # concurrent sessions that read the same max before either committed
        return (self.model.reservation_date.asc(), self.model.queue_order.asc(), self.model.id.asc())

    @translate_db_errors("save reservation")
    def save(self, reservation: ReservationModel) -> ReservationModel:
        """
        Insert a reservation, stamping its queue position.

        Returns:
            Saved reservation with id and queue_order populated
        """
        if reservation.queue_order is None:
            last_order = self.db.query(func.max(self.model.queue_order)).scalar()
            reservation.queue_order = (last_order or 0) + 1
        if reservation.reservation_date is None:
            reservation.reservation_date = datetime.utcnow()
        self.db.add(reservation)
        self.db.flush()
        return reservation

    @translate_db_errors("find reservations by user")
    def find_by_user_id(self, user_id: Optional[int]) -> List[ReservationModel]:
        if not is_valid_id(user_id):
            return []
        return self.db.query(self.model).filter(
            self.model.user_id == user_id
        ).order_by(*self._queue_ordering()).all()

    @translate_db_errors("find active reservations by user")
    def find_active_by_user_id(self, user_id: Optional[int]) -> List[ReservationModel]:
        if not is_valid_id(user_id):
            return []
        return self.db.query(self.model).filter(
            self.model.user_id == user_id,
            self.model.status == ReservationStatus.ACTIVE.value
        ).order_by(*self._queue_ordering()).all()

    @translate_db_errors("find reservation queue")
    def find_active_by_item_id(self, item_id: Optional[int]) -> List[ReservationModel]:
        """
        Get the waiting queue for an item.

        Args:
            item_id: Media item id

        Returns:
            ACTIVE reservations, earliest first (FIFO)
        """
        if not is_valid_id(item_id):
            return []
        return self.db.query(self.model).filter(
            self.model.item_id == item_id,
            self.model.status == ReservationStatus.ACTIVE.value
        ).order_by(*self._queue_ordering()).all()

    @translate_db_errors("find queue head")
    def find_queue_head(self, item_id: Optional[int]) -> Optional[ReservationModel]:
        """Get the earliest ACTIVE reservation for an item, or None."""
        if not is_valid_id(item_id):
            return None
        return self.db.query(self.model).filter(
            self.model.item_id == item_id,
            self.model.status == ReservationStatus.ACTIVE.value
        ).order_by(*self._queue_ordering()).with_for_update().first()

    @translate_db_errors("find expired reservations")
    def find_expired_reservations(self, as_of: datetime) -> List[ReservationModel]:
        """
        Get ACTIVE reservations whose hold window closed before as_of.

        Records already in a terminal state are never returned.
        """
        if as_of is None:
            return []
        return self.db.query(self.model).filter(
            self.model.status == ReservationStatus.ACTIVE.value,
            self.model.expiry_date < as_of
        ).order_by(*self._queue_ordering()).all()

    @translate_db_errors("count reservation queue")
    def count_active_by_item_id(self, item_id: Optional[int]) -> int:
        if not is_valid_id(item_id):
            return 0
        return self.db.query(self.model).filter(
            self.model.item_id == item_id,
            self.model.status == ReservationStatus.ACTIVE.value
        ).count()
