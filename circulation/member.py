from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Union

from circulation.errors import (
    AlreadyRenewed,
    CheckoutDenied,
    HasReservations,
    InvalidPayment,
    LoanNotFound,
    PaymentExceedsBalance,
)
from circulation.items import LibraryItem
from circulation.loan import MAX_RENEWALS, Loan
from circulation.reservation import Reservation

logger = logging.getLogger(__name__)

STANDARD_MAX_LOANS = 5
PREMIUM_MAX_LOANS = 8
FEE_THRESHOLD = Decimal("10")

LOAN_LIMIT_REACHED = "loan limit reached"
FEES_EXCEED_THRESHOLD = "fees exceed threshold"


class MembershipType(Enum):
    STANDARD = "standard"
    PREMIUM = "premium"


class CheckoutEligibility(NamedTuple):
    allowed: bool
    reason: Optional[str] = None


def to_amount(value: Union[Decimal, int, float, str]) -> Decimal:
    """Convert user input to a Decimal amount without float artifacts."""
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation as e:
        raise InvalidPayment(f"Invalid amount: {value!r}") from e
    if not amount.is_finite():
        raise InvalidPayment(f"Invalid amount: {value!r}")
    return amount


class Member:
    """A borrower with current loans, loan history and a fee balance."""

    def __init__(self, id: str, name: str,
                 membership_type: Union[MembershipType, str] = MembershipType.STANDARD) -> None:
        self.id = id.strip()
        self.name = name.strip()
        self.membership_type = MembershipType(membership_type)
        self.current_loans: Dict[str, Loan] = {}
        self.loan_history: List[Loan] = []
        self.outstanding_fees = Decimal("0")
        self.reservations: List[Reservation] = []

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.name} ({self.membership_type.value}, ID: {self.id})"

    @property
    def max_loans(self) -> int:
        if self.membership_type is MembershipType.PREMIUM:
            return PREMIUM_MAX_LOANS
        return STANDARD_MAX_LOANS

    def can_checkout(self) -> CheckoutEligibility:
        # loan limit is reported before fees
        if len(self.current_loans) >= self.max_loans:
            return CheckoutEligibility(False, LOAN_LIMIT_REACHED)
        if self.outstanding_fees > FEE_THRESHOLD:
            return CheckoutEligibility(False, FEES_EXCEED_THRESHOLD)
        return CheckoutEligibility(True)

    def checkout_item(self, item: LibraryItem, date: datetime) -> Loan:
        eligibility = self.can_checkout()
        if not eligibility.allowed:
            logger.warning(f"Checkout of {item.id} denied for member {self.id}: {eligibility.reason}")
            raise CheckoutDenied(eligibility.reason)
        loan = item.checkout(self.id, date)
        self.current_loans[item.id] = loan
        self.loan_history.append(loan)
        return loan

    def return_item(self, item: LibraryItem, return_date: datetime) -> Loan:
        loan = self.current_loans.get(item.id)
        if loan is None:
            raise LoanNotFound("Item not found in current loans")
        item.return_item(return_date)
        del self.current_loans[item.id]
        if loan.late_fee > 0:
            self.outstanding_fees += loan.late_fee
        return loan

    def renew_item(self, item: LibraryItem) -> Loan:
        """Renew the loan for ``item`` by the item's current loan period."""
        loan = self.current_loans.get(item.id)
        if loan is None:
            raise LoanNotFound("Item not found in current loans")
        if not item.can_be_renewed():
            raise HasReservations("Item has reservations and cannot be renewed")
        if loan.renewal_count >= MAX_RENEWALS:
            raise AlreadyRenewed("Item has already been renewed once")
        loan.renew(item.get_loan_period())
        return loan

    def reserve_item(self, item: LibraryItem, date: datetime) -> Reservation:
        reservation = item.add_reservation(self.id, date)
        self.reservations.append(reservation)
        return reservation

    def pay_fees(self, amount: Union[Decimal, int, float, str]) -> Decimal:
        amount = to_amount(amount)
        if amount <= 0:
            raise InvalidPayment("Payment amount must be positive")
        if amount > self.outstanding_fees:
            raise PaymentExceedsBalance("Payment exceeds outstanding fees")
        self.outstanding_fees -= amount
        return self.outstanding_fees

    def get_overdue_loans(self, now: datetime) -> List[Loan]:
        return [loan for loan in self.current_loans.values() if loan.is_overdue(now)]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "membership_type": self.membership_type.value,
            "current_loans": len(self.current_loans),
            "max_loans": self.max_loans,
            "outstanding_fees": f"{self.outstanding_fees:.2f}",
            "reservations": len(self.reservations),
        }
