"""
Dependency providers for the lending services.

Factory functions that wire repositories and services onto one database
session, so the library and reservation services share a transaction.
"""

from typing import Optional

from sqlalchemy.orm import Session

from config.lending_config import LendingPolicy
from services.auth_service import AuthService
from services.interfaces import IAuthService, ILibraryService, IReservationService
from services.library_service import LibraryService


def get_library_service(db: Session, policy: Optional[LendingPolicy] = None) -> ILibraryService:
    """
    Factory function for creating LibraryService instances.

    Args:
        db: Database session
        policy: Optional policy override

    Returns:
        LibraryService with its ReservationService attached
    """
    return LibraryService(db, policy=policy)


def get_reservation_service(db: Session, policy: Optional[LendingPolicy] = None) -> IReservationService:
    """
    Factory function for creating ReservationService instances.

    The returned service is the one attached to a fresh LibraryService, so
    promotions borrow through the same session.
    """
    return LibraryService(db, policy=policy).reservation_service


def get_auth_service(db: Session) -> IAuthService:
    return AuthService(db)

