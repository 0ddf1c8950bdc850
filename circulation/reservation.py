from __future__ import annotations

from datetime import datetime


class Reservation:
    """A member's place in an item's hold queue."""

    def __init__(self, item_id: str, member_id: str, reservation_date: datetime) -> None:
        self.item_id = item_id
        self.member_id = member_id
        self.reservation_date = reservation_date
        self.notified = False

    def notify(self) -> None:
        # delivery is up to the caller; this only records that it is due
        self.notified = True

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "member_id": self.member_id,
            "reservation_date": self.reservation_date.isoformat(),
            "notified": self.notified,
        }
