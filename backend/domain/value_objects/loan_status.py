"""
LoanStatus Value Object
"""

from enum import Enum


class LoanStatus(str, Enum):
    """Loan lifecycle: ACTIVE until the copy comes back, then RETURNED."""

    ACTIVE = "ACTIVE"
    RETURNED = "RETURNED"

    def is_terminal(self) -> bool:
        return self is LoanStatus.RETURNED

    def can_transition_to(self, new_state: "LoanStatus") -> bool:
        return self is LoanStatus.ACTIVE and new_state is LoanStatus.RETURNED

    @classmethod
    def from_string(cls, value: str) -> "LoanStatus":
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Invalid loan status: {value}")
