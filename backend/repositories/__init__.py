"""
Repository layer for data access abstraction.

This package contains repository classes that encapsulate database queries
and provide a clean interface for data access operations.
"""

from .base_repository import BaseRepository
from .user_repository import UserRepository
from .media_item_repository import MediaItemRepository
from .loan_repository import LoanRepository
from .reservation_repository import ReservationRepository
from .fine_repository import FineRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "MediaItemRepository",
    "LoanRepository",
    "ReservationRepository",
    "FineRepository",
]
