from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from circulation.errors import LoanAlreadyReturned, MaxRenewalsReached
from circulation.policy import ItemType, policy_for

if TYPE_CHECKING:
    from circulation.items import LibraryItem

logger = logging.getLogger(__name__)

MAX_RENEWALS = 1
ONE_DAY = timedelta(days=1)


class Loan:
    """A single checkout of one item by one member.

    The loan only keeps the ids of its item and member; the Library resolves
    them when a caller needs the full records.
    """

    def __init__(self, item_id: str, member_id: str, item_type: ItemType,
                 checkout_date: datetime, due_date: datetime) -> None:
        self.item_id = item_id
        self.member_id = member_id
        self.item_type = item_type
        self.checkout_date = checkout_date
        self.due_date = due_date
        self.return_date: Optional[datetime] = None
        self.late_fee = Decimal("0")
        self.renewal_count = 0

    @classmethod
    def open(cls, item: "LibraryItem", member_id: str, checkout_date: datetime) -> "Loan":
        """Start a loan; the item's current loan period is fixed into the due date."""
        due_date = checkout_date + timedelta(days=item.get_loan_period())
        return cls(item.id, member_id, item.item_type, checkout_date, due_date)

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return (f"Loan(item_id={self.item_id!r}, member_id={self.member_id!r}, "
                f"due_date={self.due_date.isoformat()}, returned={self.is_returned})")

    @property
    def is_returned(self) -> bool:
        return self.return_date is not None

    @property
    def late_fee_per_day(self) -> Decimal:
        return policy_for(self.item_type).late_fee_per_day

    def is_overdue(self, now: datetime) -> bool:
        return self.return_date is None and now > self.due_date

    def get_days_overdue(self, now: datetime) -> int:
        if not self.is_overdue(now):
            return 0
        # partial days count as a full day
        return math.ceil((now - self.due_date) / ONE_DAY)

    def calculate_late_fee(self, return_date: datetime) -> Decimal:
        return self.get_days_overdue(return_date) * self.late_fee_per_day

    def process_return(self, return_date: datetime) -> None:
        """Finalize the loan. A loan can only be returned once."""
        if self.is_returned:
            raise LoanAlreadyReturned(f"Loan for item {self.item_id} has already been returned")
        # fee has to be computed while the loan still counts as open
        self.late_fee = self.calculate_late_fee(return_date)
        self.return_date = return_date
        if self.late_fee > 0:
            logger.info(f"Late fee {self.late_fee} charged for item {self.item_id} (member {self.member_id})")

    def renew(self, loan_period: int) -> None:
        """Push the due date forward by another loan period, counted from the old due date."""
        if self.is_returned:
            raise LoanAlreadyReturned(f"Loan for item {self.item_id} has already been returned")
        if self.renewal_count >= MAX_RENEWALS:
            raise MaxRenewalsReached("Maximum renewals reached")
        self.renewal_count += 1
        self.due_date = self.due_date + timedelta(days=loan_period)

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "member_id": self.member_id,
            "item_type": self.item_type.value,
            "checkout_date": self.checkout_date.isoformat(),
            "due_date": self.due_date.isoformat(),
            "return_date": self.return_date.isoformat() if self.return_date else None,
            "late_fee": f"{self.late_fee:.2f}",
            "renewal_count": self.renewal_count,
        }
