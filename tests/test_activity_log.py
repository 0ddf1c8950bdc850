import pytest
from datetime import datetime, timedelta
from rich.console import Console

from utils.activity_log import ActivityLog


def _ticking_clock(start=datetime(2024, 1, 1, 9, 0, 0)):
    state = {"now": start}

    def tick():
        state["now"] += timedelta(seconds=1)
        return state["now"]
    return tick


def test_add_entries():
    log = ActivityLog(clock=_ticking_clock())
    entry = log.success("  Checked out \"Dune\"  ")
    assert entry.message == 'Checked out "Dune"'
    assert entry.kind == "success"
    assert entry.time == datetime(2024, 1, 1, 9, 0, 1)
    log.error("Item not found")
    log.info("No outstanding fees")
    assert [e.kind for e in log.entries] == ["success", "error", "info"]
    assert len(log) == 3


def test_unknown_kind_rejected():
    log = ActivityLog()
    with pytest.raises(ValueError):
        log.add("hello", "warning")


def test_latest_newest_first():
    log = ActivityLog()
    for i in range(7):
        log.info(f"event {i}")
    assert [e.message for e in log.latest(5)] == ["event 6", "event 5", "event 4", "event 3", "event 2"]
    assert log.latest(0) == []


def test_bounded_history():
    log = ActivityLog(max_entries=3)
    for i in range(5):
        log.info(f"event {i}")
    assert [e.message for e in log.entries] == ["event 2", "event 3", "event 4"]


def test_render():
    console = Console(record=True, width=100)
    log = ActivityLog(clock=_ticking_clock())
    log.render(console)
    assert "No activity yet" in console.export_text()

    log.error("Item [B001] is already checked out")
    log.render(console)
    text = console.export_text()
    assert "09:00:01" in text
    assert "Item [B001] is already checked out" in text
