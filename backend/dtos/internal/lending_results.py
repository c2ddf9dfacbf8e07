"""
Internal lending result DTOs.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from models import Fine, Loan


@dataclass
class ReturnResult:
    """
    Outcome of returning a loan.

    fine is set only when the loan came back late; promoted_loan is set when
    the freed copy went straight to the head of the reservation queue.
    """

    loan: Loan
    fine: Optional[Fine] = None
    promoted_loan: Optional[Loan] = None

    @property
    def fine_amount(self) -> Decimal:
        return self.fine.amount if self.fine is not None else Decimal('0.00')

    @property
    def was_late(self) -> bool:
        return self.fine is not None
