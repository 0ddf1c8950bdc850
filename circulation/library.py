from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, NamedTuple, Optional, Tuple, Union

from circulation.clock import Clock, SystemClock
from circulation.errors import ItemNotFound, MemberNotFound
from circulation.items import LibraryItem
from circulation.loan import Loan
from circulation.member import Member
from circulation.reservation import Reservation

logger = logging.getLogger(__name__)


class OverdueLoan(NamedTuple):
    member: Member
    loan: Loan


class Library:
    """Owns the catalog and the member directory and runs circulation by id.

    Every date argument is optional and falls back to ``clock.now()``.
    """

    def __init__(self, name: str, clock: Optional[Clock] = None) -> None:
        self.name = name
        self.clock: Clock = clock or SystemClock()
        self.catalog: Dict[str, LibraryItem] = {}
        self.members: Dict[str, Member] = {}

    # ------------------------- Registry ------------------------- #
    def add_item(self, item: LibraryItem) -> None:
        """Add an item to the catalog, replacing any item with the same id."""
        self.catalog[item.id] = item

    def add_member(self, member: Member) -> None:
        self.members[member.id] = member

    def get_item(self, item_id: str) -> Optional[LibraryItem]:
        return self.catalog.get(item_id)

    def get_member(self, member_id: str) -> Optional[Member]:
        return self.members.get(member_id)

    def _resolve(self, member_id: str, item_id: str) -> Tuple[Member, LibraryItem]:
        member = self.get_member(member_id)
        item = self.get_item(item_id)
        if member is None:
            raise MemberNotFound(f"Member {member_id} not found")
        if item is None:
            raise ItemNotFound(f"Item {item_id} not found")
        return member, item

    def _resolve_member(self, member_id: str) -> Member:
        member = self.get_member(member_id)
        if member is None:
            raise MemberNotFound(f"Member {member_id} not found")
        return member

    def _now(self, date: Optional[datetime]) -> datetime:
        return date if date is not None else self.clock.now()

    # ------------------------- Circulation ------------------------- #
    def checkout_item(self, member_id: str, item_id: str, date: Optional[datetime] = None) -> Loan:
        member, item = self._resolve(member_id, item_id)
        loan = member.checkout_item(item, self._now(date))
        logger.info(f"{item.title} checked out to {member.name}, due {loan.due_date.date().isoformat()}")
        return loan

    def return_item(self, member_id: str, item_id: str, return_date: Optional[datetime] = None) -> Loan:
        member, item = self._resolve(member_id, item_id)
        loan = member.return_item(item, self._now(return_date))
        logger.info(f"{item.title} returned by {member.name}")
        return loan

    def renew_item(self, member_id: str, item_id: str) -> Loan:
        member, item = self._resolve(member_id, item_id)
        loan = member.renew_item(item)
        logger.info(f"{item.title} renewed for {member.name}, now due {loan.due_date.date().isoformat()}")
        return loan

    def reserve_item(self, member_id: str, item_id: str, date: Optional[datetime] = None) -> Reservation:
        member, item = self._resolve(member_id, item_id)
        reservation = member.reserve_item(item, self._now(date))
        logger.info(f"{item.title} reserved by {member.name} (queue length {len(item.reservations)})")
        return reservation

    def pay_fees(self, member_id: str, amount: Union[Decimal, int, float, str]) -> Decimal:
        member = self._resolve_member(member_id)
        balance = member.pay_fees(amount)
        logger.info(f"{member.name} paid {amount}; balance {balance:.2f}")
        return balance

    # ------------------------- Views ------------------------- #
    def get_overdue_items(self, now: Optional[datetime] = None) -> List[OverdueLoan]:
        now = self._now(now)
        overdue: List[OverdueLoan] = []
        for member in self.members.values():
            overdue.extend(OverdueLoan(member, loan) for loan in member.get_overdue_loans(now))
        return overdue

    def get_available_items(self) -> List[LibraryItem]:
        return [item for item in self.catalog.values() if not item.is_checked_out]

    def get_popular_items(self) -> List[LibraryItem]:
        """Popular items, most checked out first. ``sorted`` keeps catalog order on ties."""
        popular = [item for item in self.catalog.values() if item.is_popular]
        return sorted(popular, key=lambda item: item.total_checkouts, reverse=True)

    def get_statistics(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        return {
            "total_items": len(self.catalog),
            "available_items": len(self.get_available_items()),
            "overdue_loans": len(self.get_overdue_items(now)),
            "total_members": len(self.members),
        }
