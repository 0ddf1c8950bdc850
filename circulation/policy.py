from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Dict, NamedTuple


class ItemType(Enum):
    BOOK = "Book"
    DVD = "DVD"
    MAGAZINE = "Magazine"

    @classmethod
    def parse(cls, raw: str) -> "ItemType":
        """Accept either the display value ('DVD') or the member name ('dvd')."""
        text = (raw or "").strip()
        for item_type in cls:
            if text == item_type.value or text.upper() == item_type.name:
                return item_type
        raise ValueError(f"Unknown item type: {raw!r}")


class LoanPolicy(NamedTuple):
    base_loan_period: int
    late_fee_per_day: Decimal


LOAN_POLICIES: Dict[ItemType, LoanPolicy] = {
    ItemType.BOOK: LoanPolicy(base_loan_period=14, late_fee_per_day=Decimal("10.00")),
    ItemType.DVD: LoanPolicy(base_loan_period=7, late_fee_per_day=Decimal("10.00")),
    ItemType.MAGAZINE: LoanPolicy(base_loan_period=3, late_fee_per_day=Decimal("10")),
}

# Items checked out more than this many times count as popular.
POPULARITY_THRESHOLD = 10
POPULAR_PERIOD_REDUCTION = 2
MIN_LOAN_PERIOD = 1


def policy_for(item_type: ItemType) -> LoanPolicy:
    return LOAN_POLICIES[item_type]
