from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Time source used for every date the caller leaves out."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall-clock time."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """Clock that only moves when told to. Used by tests and the demo session."""

    def __init__(self, current: datetime) -> None:
        self.current = current

    def now(self) -> datetime:
        return self.current

    def set(self, current: datetime) -> None:
        self.current = current

    def advance(self, days: int = 0, hours: int = 0) -> datetime:
        self.current = self.current + timedelta(days=days, hours=hours)
        return self.current
