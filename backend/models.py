from sqlalchemy import (
    Column, String, Integer, Boolean, Date, DateTime, Numeric,
    ForeignKey, CheckConstraint, Index,
)
from sqlalchemy.orm import relationship
from datetime import datetime, date
from decimal import Decimal

from constants import MoneyConfig, Role
from database import Base
from domain.value_objects import LoanStatus, ReservationStatus


def _money():
    return Numeric(MoneyConfig.NUMERIC_PRECISION, MoneyConfig.DECIMAL_PLACES, asdecimal=True)


class User(Base):
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=False)  # bcrypt hash, never the raw password
    email = Column(String, nullable=False, unique=True)
    role = Column(String, nullable=False, default=Role.MEMBER.value)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    loans = relationship("Loan", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    reservations = relationship(
        "Reservation", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    __table_args__ = (
        CheckConstraint("username != ''"),
        CheckConstraint("role IN ('MEMBER', 'ADMIN')"),
    )


class MediaItem(Base):
    """
    A lendable title with a pool of physical copies.

    available_copies is expected to stay within 0..total_copies but is
    allowed to go negative to signal over-committed copies; nothing in the
    store rejects a negative count.
    """
    __tablename__ = 'media_items'

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    author = Column(String)
    media_type = Column(String, nullable=False)  # Free-form tag (BOOK, CD, DVD, ...)
    isbn = Column(String, unique=True, nullable=True)
    publication_date = Column(Date)
    publisher = Column(String)
    total_copies = Column(Integer, nullable=False, default=1)
    available_copies = Column(Integer, nullable=False, default=1)
    late_fees_per_day = Column(_money(), nullable=False, default=Decimal('0.00'))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    loans = relationship("Loan", back_populates="item", cascade="all, delete-orphan", passive_deletes=True)
    reservations = relationship(
        "Reservation", back_populates="item", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def has_available_copy(self) -> bool:
        return (self.available_copies or 0) > 0

    __table_args__ = (
        CheckConstraint("title != ''"),
        CheckConstraint("late_fees_per_day >= 0"),
        Index('idx_media_items_type', 'media_type'),
    )


class Loan(Base):
    __tablename__ = 'loans'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    item_id = Column(Integer, ForeignKey('media_items.id', ondelete='CASCADE'), nullable=False)
    loan_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    return_date = Column(Date, nullable=True)
    status = Column(String, nullable=False, default=LoanStatus.ACTIVE.value)

    user = relationship("User", back_populates="loans")
    item = relationship("MediaItem", back_populates="loans")
    fine = relationship(
        "Fine", back_populates="loan", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def is_active(self) -> bool:
        return self.status == LoanStatus.ACTIVE.value

    def is_overdue(self, as_of: date) -> bool:
        """Check if the loan is still out past its due date"""
        return self.is_active and as_of > self.due_date

    __table_args__ = (
        CheckConstraint("status IN ('ACTIVE', 'RETURNED')"),
        Index('idx_loans_user', 'user_id'),
        Index('idx_loans_item', 'item_id'),
        Index('idx_loans_status_due', 'status', 'due_date'),
    )


class Reservation(Base):
    """
    A queued request to borrow an item with no free copy.

    Queue position is (reservation_date, queue_order). queue_order is a
    store-assigned monotonic sequence, so two reservations created within the
    same clock tick still keep their creation order.
    """
    __tablename__ = 'reservations'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    item_id = Column(Integer, ForeignKey('media_items.id', ondelete='CASCADE'), nullable=False)
    reservation_date = Column(DateTime, nullable=False, default=datetime.utcnow)
    expiry_date = Column(DateTime, nullable=False)
    status = Column(String, nullable=False, default=ReservationStatus.ACTIVE.value)
    queue_order = Column(Integer, nullable=False)

    user = relationship("User", back_populates="reservations")
    item = relationship("MediaItem", back_populates="reservations")

    @property
    def is_active(self) -> bool:
        return self.status == ReservationStatus.ACTIVE.value

    __table_args__ = (
        CheckConstraint("status IN ('ACTIVE', 'FULFILLED', 'CANCELLED', 'EXPIRED')"),
        Index('idx_reservations_queue', 'item_id', 'status', 'reservation_date', 'queue_order'),
        Index('idx_reservations_user', 'user_id'),
        Index('idx_reservations_expiry', 'status', 'expiry_date'),
    )


class Fine(Base):
    __tablename__ = 'fines'

    id = Column(Integer, primary_key=True, autoincrement=True)
    loan_id = Column(Integer, ForeignKey('loans.id', ondelete='CASCADE'), nullable=False, unique=True)
    amount = Column(_money(), nullable=False)
    paid = Column(Boolean, nullable=False, default=False)
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    loan = relationship("Loan", back_populates="fine")

    __table_args__ = (
        CheckConstraint("amount >= 0"),
    )
