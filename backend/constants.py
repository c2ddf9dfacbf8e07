"""
Application-wide constants and policy defaults.

This module centralizes the magic strings and numbers used by the lending
services so the rules live in one place.
"""
from enum import Enum
from typing import Optional


class MediaType(str, Enum):
    """
    Media types with a dedicated lending policy.

    Items may carry any type tag; tags outside this enum are valid and fall
    back to the default loan period.
    """

    BOOK = 'BOOK'
    CD = 'CD'

    @classmethod
    def from_tag(cls, tag: Optional[str]) -> Optional['MediaType']:
        """Resolve a free-form type tag, or None if it has no dedicated policy."""
        if not tag:
            return None
        try:
            return cls(tag.strip().upper())
        except ValueError:
            return None


class Role(str, Enum):
    """User roles"""

    MEMBER = 'MEMBER'
    ADMIN = 'ADMIN'


class BusinessErrorCode(str, Enum):
    """
    Rule violations surfaced by the lending services.

    Each code has a stable string value so callers can branch on it without
    parsing messages.
    """

    USER_NOT_FOUND = 'USER_NOT_FOUND'
    ITEM_NOT_FOUND = 'ITEM_NOT_FOUND'
    LOAN_NOT_FOUND = 'LOAN_NOT_FOUND'
    NO_COPIES_AVAILABLE = 'NO_COPIES_AVAILABLE'
    LOAN_ALREADY_RETURNED = 'LOAN_ALREADY_RETURNED'
    RESERVATION_NOT_FOUND = 'RESERVATION_NOT_FOUND'
    RESERVATION_NOT_ACTIVE = 'RESERVATION_NOT_ACTIVE'
    FINE_NOT_FOUND = 'FINE_NOT_FOUND'
    FINE_ALREADY_PAID = 'FINE_ALREADY_PAID'

    @classmethod
    def get_message(cls, code: 'BusinessErrorCode') -> str:
        """Get default human-readable message for a code"""
        messages = {
            cls.USER_NOT_FOUND: "User not found",
            cls.ITEM_NOT_FOUND: "Media item not found",
            cls.LOAN_NOT_FOUND: "Loan not found",
            cls.NO_COPIES_AVAILABLE: "No copies available",
            cls.LOAN_ALREADY_RETURNED: "Loan has already been returned",
            cls.RESERVATION_NOT_FOUND: "Reservation not found",
            cls.RESERVATION_NOT_ACTIVE: "Reservation is no longer active",
            cls.FINE_NOT_FOUND: "Fine not found",
            cls.FINE_ALREADY_PAID: "Fine has already been paid",
        }
        return messages.get(code, "Business rule violated")


class PolicyDefaults:
    """Default lending policy values (overridable via LENDING_* env vars)"""

    BOOK_LOAN_DAYS = 21
    CD_LOAN_DAYS = 7
    DEFAULT_LOAN_DAYS = 14  # Unknown media types
    RESERVATION_WINDOW_HOURS = 48
    BCRYPT_ROUNDS = 12


class MoneyConfig:
    """Monetary amount handling"""

    DECIMAL_PLACES = 2
    NUMERIC_PRECISION = 10
