"""Build a Library from seed data.

Seed data is a plain mapping so it can come from code, a JSON file or a test::

    {
        "name": "Community Library",
        "items": [{"id": "B001", "title": "...", "item_type": "Book",
                   "author": "...", "isbn": "...", "prior_checkouts": 12}],
        "members": [{"id": "MEM001", "name": "...", "membership_type": "standard"}],
    }

``prior_checkouts`` pre-fills an item's checkout history, which is how the
demo catalog starts with a popular title.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from circulation.clock import Clock
from circulation.errors import SeedDataError
from circulation.items import CheckoutRecord, LibraryItem
from circulation.library import Library
from circulation.member import Member

logger = logging.getLogger(__name__)

DEMO_SEED: Dict[str, Any] = {
    "name": "Community Library",
    "items": [
        {"id": "B004", "title": "The White Tiger", "item_type": "Book",
         "author": "Aravind Adiga", "isbn": "1234", "prior_checkouts": 12},
        {"id": "B005", "title": "The God of Small Things", "item_type": "Book",
         "author": "Arundhati Roy", "isbn": "5678"},
        {"id": "B006", "title": "Midnight's Children", "item_type": "Book",
         "author": "Salman Rushdie", "isbn": "7868"},
        {"id": "D001", "title": "Inception", "item_type": "DVD",
         "director": "Christopher Nolan", "duration": 148},
        {"id": "M001", "title": "National Geographic", "item_type": "Magazine",
         "issue": "Vol 244 No 1", "publish_date": "2024-01"},
    ],
    "members": [
        {"id": "MEM001", "name": "Ahmed", "membership_type": "standard"},
        {"id": "MEM002", "name": "Mohsin", "membership_type": "premium"},
        {"id": "MEM003", "name": "Jhon", "membership_type": "standard"},
    ],
}


def load_seed(library: Library, seed: Dict[str, Any]) -> Library:
    """Add the seed's items and members to ``library``."""
    now = library.clock.now()
    for raw in seed.get("items", []):
        try:
            item = LibraryItem.from_dict(raw)
            prior = int(raw.get("prior_checkouts", 0))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise SeedDataError(f"Invalid item in seed data: {raw!r} ({e})") from e
        item.checkout_history.extend(CheckoutRecord(f"M{i}", now) for i in range(prior))
        library.add_item(item)

    for raw in seed.get("members", []):
        try:
            member = Member(raw["id"], raw["name"], raw.get("membership_type", "standard"))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise SeedDataError(f"Invalid member in seed data: {raw!r} ({e})") from e
        library.add_member(member)

    logger.info(f"Seeded {library.name}: {len(library.catalog)} items, {len(library.members)} members")
    return library


def build_library(seed: Dict[str, Any], clock: Optional[Clock] = None, name: Optional[str] = None) -> Library:
    library = Library(name or seed.get("name", "Library"), clock=clock)
    return load_seed(library, seed)


def read_seed_file(path: str) -> Dict[str, Any]:
    """Read seed data from a JSON file."""
    try:
        with open(Path(path), "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SeedDataError(f"Could not read seed file {path}: {e}") from e
    if not isinstance(data, dict):
        raise SeedDataError(f"Seed file {path} must contain a JSON object")
    return data
