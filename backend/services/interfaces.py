"""
Service Interfaces

Abstract base classes for the lending services, so callers can depend on
the contract and tests can substitute doubles.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from dtos.internal import ReturnResult
from models import Fine, Loan, MediaItem, Reservation, User


class ILibraryService(ABC):
    """
    Interface for borrowing, returning and catalogue maintenance.
    """

    @abstractmethod
    def add_media_item(self, item: MediaItem) -> MediaItem:
        """
        Validate and persist a new media item.

        Raises:
            ValidationError: If item is None or a required field is invalid
            DataAccessError: On a store constraint violation (e.g. duplicate ISBN)
        """

    @abstractmethod
    def update_media_item(self, item: MediaItem) -> MediaItem:
        """
        Validate and persist changes to an existing media item.

        Raises:
            ValidationError: If item is None or a required field is invalid
            DataAccessError: If the item does not exist
        """

    @abstractmethod
    def delete_media_item(self, item_id: int) -> bool:
        """Delete an item and its loans/reservations; False if not found."""

    @abstractmethod
    def get_media_item(self, item_id: int) -> Optional[MediaItem]:
        """Look up an item; None when absent."""

    @abstractmethod
    def search_media_items(self, keyword: Optional[str]) -> List[MediaItem]:
        """Keyword search; None or blank keyword returns an empty list."""

    @abstractmethod
    def borrow_item(self, user_id: int, item_id: int, as_of: Optional[date] = None) -> Loan:
        """
        Lend one copy of an item to a user.

        Raises:
            BusinessError: USER_NOT_FOUND, ITEM_NOT_FOUND or NO_COPIES_AVAILABLE
        """

    @abstractmethod
    def return_item(self, loan_id: int, as_of: Optional[date] = None) -> ReturnResult:
        """
        Close a loan, put the copy back, raise any fine and promote the queue.

        Raises:
            BusinessError: LOAN_NOT_FOUND, LOAN_ALREADY_RETURNED or ITEM_NOT_FOUND
        """

    @abstractmethod
    def pay_fine(self, fine_id: int, when: Optional[datetime] = None) -> Fine:
        """
        Mark a fine as paid.

        Raises:
            BusinessError: FINE_NOT_FOUND or FINE_ALREADY_PAID
        """

    @abstractmethod
    def get_outstanding_balance(self, user_id: int) -> Decimal:
        """Total of a user's unpaid fines."""


class IReservationService(ABC):
    """
    Interface for the per-item FIFO reservation queue.
    """

    @abstractmethod
    def reserve(self, user_id: int, item_id: int, as_of: Optional[datetime] = None) -> Reservation:
        """Join the queue for an item."""

    @abstractmethod
    def find_active_by_item_id(self, item_id: int) -> List[Reservation]:
        """ACTIVE reservations for an item, earliest first."""

    @abstractmethod
    def promote(self, item_id: int, as_of: Optional[date] = None) -> Optional[Loan]:
        """Turn the queue head into a loan if a copy is free; None otherwise."""

    @abstractmethod
    def expire_reservations(self, as_of: Optional[datetime] = None) -> int:
        """Expire ACTIVE reservations past their hold window; returns the count."""

    @abstractmethod
    def cancel(self, reservation_id: int) -> Reservation:
        """
        Cancel an ACTIVE reservation.

        Raises:
            BusinessError: RESERVATION_NOT_FOUND or RESERVATION_NOT_ACTIVE
        """

    @abstractmethod
    def count_active_by_item_id(self, item_id: int) -> int:
        """Queue length for an item."""


class IAuthService(ABC):
    """
    Interface for credential checks and registration.
    """

    @abstractmethod
    def login(self, username: Optional[str], password: Optional[str]) -> User:
        """
        Authenticate a user.

        Raises:
            AuthenticationError: On blank input or bad credentials
        """

    @abstractmethod
    def register(self, request) -> User:
        """
        Create a new member account.

        Raises:
            AuthenticationError: If request is None or username/email is taken
            ValidationError: If the payload is malformed
        """
