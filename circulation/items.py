from __future__ import annotations

import logging
from collections import deque
from datetime import datetime
from decimal import Decimal
from typing import Any, Deque, Dict, List, NamedTuple, Optional

from circulation.errors import AlreadyCheckedOut, ItemNotCheckedOut, NotCheckedOut
from circulation.loan import Loan
from circulation.policy import (
    MIN_LOAN_PERIOD,
    POPULAR_PERIOD_REDUCTION,
    POPULARITY_THRESHOLD,
    ItemType,
    policy_for,
)
from circulation.reservation import Reservation

logger = logging.getLogger(__name__)

# Descriptive fields each item type carries besides id and title.
ITEM_FIELDS: Dict[ItemType, tuple] = {
    ItemType.BOOK: ("author", "isbn"),
    ItemType.DVD: ("director", "duration"),
    ItemType.MAGAZINE: ("issue", "publish_date"),
}


class CheckoutRecord(NamedTuple):
    member_id: str
    date: datetime


class LibraryItem:
    """A catalog entry (book, DVD or magazine) and its checkout lifecycle.

    Loan period and late fee come from the policy table for ``item_type``;
    the descriptive fields differ per type and live in ``details``.
    """

    def __init__(self, id: str, title: str, item_type: ItemType, **details: Any) -> None:
        self.id = id.strip()
        self.title = title.strip()
        self.item_type = item_type
        self.details: Dict[str, Any] = details
        self.is_checked_out = False
        self.checkout_history: List[CheckoutRecord] = []
        self.reservations: Deque[Reservation] = deque()
        self.current_loan: Optional[Loan] = None

    # ------------------------- Construction ------------------------- #
    @classmethod
    def book(cls, id: str, title: str, author: str, isbn: str) -> "LibraryItem":
        return cls(id, title, ItemType.BOOK, author=author, isbn=isbn)

    @classmethod
    def dvd(cls, id: str, title: str, director: str, duration: int) -> "LibraryItem":
        return cls(id, title, ItemType.DVD, director=director, duration=duration)

    @classmethod
    def magazine(cls, id: str, title: str, issue: str, publish_date: str) -> "LibraryItem":
        return cls(id, title, ItemType.MAGAZINE, issue=issue, publish_date=publish_date)

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} ({self.item_type.value}, ID: {self.id})"

    def __getattr__(self, name: str) -> Any:
        # author / director / issue ... read straight from details
        details = self.__dict__.get("details", {})
        if name in details:
            return details[name]
        raise AttributeError(f"{type(self).__name__!s} has no attribute {name!r}")

    # ------------------------- Policy ------------------------- #
    @property
    def base_loan_period(self) -> int:
        return policy_for(self.item_type).base_loan_period

    @property
    def late_fee_per_day(self) -> Decimal:
        return policy_for(self.item_type).late_fee_per_day

    @property
    def total_checkouts(self) -> int:
        return len(self.checkout_history)

    @property
    def is_popular(self) -> bool:
        return self.total_checkouts > POPULARITY_THRESHOLD

    def get_loan_period(self) -> int:
        period = self.base_loan_period
        if self.is_popular:
            period -= POPULAR_PERIOD_REDUCTION
        return max(period, MIN_LOAN_PERIOD)

    # ------------------------- Lifecycle ------------------------- #
    def can_be_checked_out(self) -> bool:
        return not self.is_checked_out

    def checkout(self, member_id: str, date: datetime) -> Loan:
        if not self.can_be_checked_out():
            raise AlreadyCheckedOut(f"{self.title} is already checked out")
        loan = Loan.open(self, member_id, date)
        self.is_checked_out = True
        self.current_loan = loan
        self.checkout_history.append(CheckoutRecord(member_id, date))
        return loan

    def return_item(self, return_date: datetime) -> Loan:
        """Finalize the current loan and notify the first member in the hold queue."""
        if not self.is_checked_out or self.current_loan is None:
            raise NotCheckedOut(f"{self.title} is not checked out")
        loan = self.current_loan
        loan.process_return(return_date)
        self.is_checked_out = False
        self.current_loan = None

        if self.reservations:
            next_reservation = self.reservations.popleft()
            next_reservation.notify()
            logger.info(f"{self.title} is available; member {next_reservation.member_id} notified")
        return loan

    def add_reservation(self, member_id: str, date: datetime) -> Reservation:
        if not self.is_checked_out:
            raise ItemNotCheckedOut("Cannot reserve an available item")
        reservation = Reservation(self.id, member_id, date)
        self.reservations.append(reservation)
        return reservation

    def can_be_renewed(self) -> bool:
        return len(self.reservations) == 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "item_type": self.item_type.value,
            **self.details,
            "is_checked_out": self.is_checked_out,
            "total_checkouts": self.total_checkouts,
            "is_popular": self.is_popular,
            "loan_period": self.get_loan_period(),
            "late_fee_per_day": f"{self.late_fee_per_day:.2f}",
            "reservations": len(self.reservations),
        }

    @staticmethod
    def from_dict(data: dict) -> "LibraryItem":
        item_type = ItemType.parse(data["item_type"])
        details = {name: data.get(name) for name in ITEM_FIELDS[item_type]}
        return LibraryItem(data["id"], data["title"], item_type, **details)
