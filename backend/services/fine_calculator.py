"""
Fine Calculator

Computes late fees for loans. Pure: no state, no I/O, same inputs give the
same amount.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from constants import MoneyConfig
from models import Loan, MediaItem

ZERO = Decimal('0.00')
_CENT = Decimal(1).scaleb(-MoneyConfig.DECIMAL_PLACES)


class FineCalculator:
    """Late fee = days past due x the item's daily fee, never negative."""

    @staticmethod
    def days_late(due_date: date, returned_on: date) -> int:
        """Whole days between the due date and the return (0 if on time)."""
        return max(0, (returned_on - due_date).days)

    def calculate(self, due_date: date, late_fees_per_day: Optional[Decimal], returned_on: date) -> Decimal:
        """
        Compute the fine for a loan returned (or evaluated) on a given date.

        Args:
            due_date: Loan due date
            late_fees_per_day: Daily fee for the item; None counts as zero
            returned_on: Return date, or the reference date for open loans

        Returns:
            Fine amount rounded to cents; ZERO when on time or not yet due
        """
        days = self.days_late(due_date, returned_on)
        if days == 0 or not late_fees_per_day:
            return ZERO

        fee = Decimal(str(late_fees_per_day))
        if fee <= 0:
            return ZERO
        return (fee * days).quantize(_CENT, rounding=ROUND_HALF_UP)

    def calculate_for_loan(self, loan: Loan, item: MediaItem, as_of: date) -> Decimal:
        """
        Compute the fine owed on a loan.

        Uses the loan's return date when it has one, otherwise as_of.
        """
        returned_on = loan.return_date or as_of
        return self.calculate(loan.due_date, item.late_fees_per_day, returned_on)
