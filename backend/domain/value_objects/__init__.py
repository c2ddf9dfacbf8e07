"""
Domain Value Objects

Value objects are immutable types that represent descriptive aspects of the domain.
They have no conceptual identity and are compared by their values, not by ID.

Examples:
- LoanStatus: Lifecycle of a loan (ACTIVE -> RETURNED)
- ReservationStatus: Reservation queue state machine
"""

from .loan_status import LoanStatus
from .reservation_status import ReservationStatus

__all__ = ["LoanStatus", "ReservationStatus"]
