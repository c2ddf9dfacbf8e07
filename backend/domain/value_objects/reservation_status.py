"""
ReservationStatus Value Object

Immutable representation of a reservation's place in the queue lifecycle.
"""

from enum import Enum


class ReservationStatus(str, Enum):
    """
    Reservation state machine.

    ACTIVE is the only non-terminal state; FULFILLED, CANCELLED and EXPIRED
    never transition anywhere.
    """

    ACTIVE = "ACTIVE"
    FULFILLED = "FULFILLED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"

    def is_terminal(self) -> bool:
        """Check if this state is terminal (no further transitions)."""
        return self is not ReservationStatus.ACTIVE

    def can_transition_to(self, new_state: "ReservationStatus") -> bool:
        """
        Check if transition to new state is valid.

        Args:
            new_state: Target state

        Returns:
            True if transition is allowed
        """
        valid_transitions = {
            ReservationStatus.ACTIVE: {
                ReservationStatus.FULFILLED,
                ReservationStatus.CANCELLED,
                ReservationStatus.EXPIRED,
            },
        }

        return new_state in valid_transitions.get(self, set())

    @classmethod
    def from_string(cls, value: str) -> "ReservationStatus":
        """
        Create ReservationStatus from string value.

        Raises:
            ValueError: If value is not a valid state
        """
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Invalid reservation status: {value}")
