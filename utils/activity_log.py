"""
Activity log for the library CLI.
Keeps a bounded history of what happened in the session, newest last.
"""

from collections import deque
from datetime import datetime
from typing import Callable, Deque, List, NamedTuple, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from config import settings

KIND_STYLES = {
    "success": "green",
    "error": "red",
    "info": "white",
}


class ActivityEntry(NamedTuple):
    message: str
    kind: str
    time: datetime


class ActivityLog:
    """Bounded session log shown in the interactive menu."""

    def __init__(self, max_entries: Optional[int] = None, clock: Optional[Callable[[], datetime]] = None) -> None:
        self.entries: Deque[ActivityEntry] = deque(maxlen=max_entries or settings.activity_log_size)
        self._clock = clock or datetime.now

    def add(self, message: str, kind: str = "info") -> ActivityEntry:
        if kind not in KIND_STYLES:
            raise ValueError(f"Unknown activity kind: {kind}")
        entry = ActivityEntry(message.strip(), kind, self._clock())
        self.entries.append(entry)
        return entry

    def success(self, message: str) -> ActivityEntry:
        return self.add(message, "success")

    def error(self, message: str) -> ActivityEntry:
        return self.add(message, "error")

    def info(self, message: str) -> ActivityEntry:
        return self.add(message, "info")

    def latest(self, count: Optional[int] = None) -> List[ActivityEntry]:
        """Most recent entries, newest first."""
        count = settings.activity_log_visible if count is None else count
        if count <= 0:
            return []
        return list(reversed(self.entries))[:count]

    def __len__(self) -> int:
        return len(self.entries)

    def render(self, console: Console, count: Optional[int] = None) -> None:
        entries = self.latest(count)
        if not entries:
            body = "[dim]No activity yet[/]"
        else:
            body = "\n".join(
                f"[dim]{e.time.strftime('%H:%M:%S')}[/] [{KIND_STYLES[e.kind]}]{escape(e.message)}[/]"
                for e in entries
            )
        console.print(Panel(body, title="Activity Log", border_style="cyan"))
