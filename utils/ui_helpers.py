import os
import json
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.markup import escape
from rich.panel import Panel

from circulation import LibraryItem, Member, OverdueLoan
from config import settings

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "LIB_CLI_OUTPUT"
OUTPUT_MODES = {"plain", "json", "rich"}

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in OUTPUT_MODES:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    mode = os.environ.get(OUTPUT_MODE_ENV, settings.output_mode).lower()
    return mode if mode in OUTPUT_MODES else "plain"


def format_money(amount: Decimal) -> str:
    return f"{settings.currency} {amount:.2f}"


def format_date(value: Optional[datetime]) -> str:
    return value.date().isoformat() if value else "-"


def _item_status(item: LibraryItem) -> str:
    if not item.is_checked_out:
        return "Available"
    if item.reservations:
        return f"Checked out ({len(item.reservations)} waiting)"
    return "Checked out"


def print_items_result(items: List[LibraryItem], title: str = "Items", empty_message: str = "No items in catalog.") -> None:
    """Print catalog items in the current output mode.
    - plain: 'ID - Title [Type] Status (checkouts, fee/day)' lines
    - json: array of item dicts
    - rich: Rich table
    """
    mode = get_output_mode()

    if not items:
        print(empty_message)
        return

    if mode == "json":
        print(json.dumps([i.to_dict() for i in items], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title=f"📚 {title}", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Type", style="white")
        table.add_column("Title", style="white")
        table.add_column("Status", style="white")
        table.add_column("Checkouts", justify="right")
        table.add_column("Loan days", justify="right")
        table.add_column("Fee/day", justify="right")
        for i in items:
            title_cell = f"{escape(i.title)} ⭐" if i.is_popular else escape(i.title)
            table.add_row(i.id, i.item_type.value, title_cell, _item_status(i),
                          str(i.total_checkouts), str(i.get_loan_period()), format_money(i.late_fee_per_day))
        _console.print(table)
    else:
        for i in items:
            popular = " *popular*" if i.is_popular else ""
            print(f"{i.id} - {i.title} [{i.item_type.value}] {_item_status(i)} "
                  f"({i.total_checkouts} checkouts, {format_money(i.late_fee_per_day)}/day){popular}")


def print_members_result(members: List[Member]) -> None:
    mode = get_output_mode()

    if not members:
        print("No members registered.")
        return

    if mode == "json":
        print(json.dumps([m.to_dict() for m in members], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="👥 Members", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Name")
        table.add_column("Membership")
        table.add_column("Loans", justify="right")
        table.add_column("Fees", justify="right")
        for m in members:
            table.add_row(m.id, escape(m.name), m.membership_type.value,
                          f"{len(m.current_loans)}/{m.max_loans}", format_money(m.outstanding_fees))
        _console.print(table)
    else:
        for m in members:
            print(f"{m.id} - {m.name} ({m.membership_type.value}) "
                  f"loans {len(m.current_loans)}/{m.max_loans}, fees {format_money(m.outstanding_fees)}")


def print_overdue_result(overdue: List[OverdueLoan], catalog: Dict[str, LibraryItem], now: datetime) -> None:
    mode = get_output_mode()

    if not overdue:
        print("No overdue loans.")
        return

    rows = []
    for entry in overdue:
        item = catalog.get(entry.loan.item_id)
        rows.append({
            "member_id": entry.member.id,
            "member": entry.member.name,
            "item_id": entry.loan.item_id,
            "title": item.title if item else entry.loan.item_id,
            "due_date": format_date(entry.loan.due_date),
            "days_overdue": entry.loan.get_days_overdue(now),
            "fee_so_far": f"{entry.loan.calculate_late_fee(now):.2f}",
        })

    if mode == "json":
        print(json.dumps(rows, ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="⏰ Overdue loans", show_lines=True, header_style="bold red")
        for column in ("Member", "Item", "Due", "Days", "Fee"):
            table.add_column(column)
        for r in rows:
            table.add_row(escape(r["member"]), escape(r["title"]), r["due_date"], str(r["days_overdue"]),
                          f"{settings.currency} {r['fee_so_far']}")
        _console.print(table)
    else:
        for r in rows:
            print(f"{r['member']} - {r['title']} due {r['due_date']} "
                  f"({r['days_overdue']} days overdue, {settings.currency} {r['fee_so_far']})")


def print_stats_result(stats: Dict[str, Any]) -> None:
    """Print statistics in the current output mode.
    - plain: one 'Label: value' line per metric
    - json: JSON object
    - rich: Panel with the main metrics
    """
    mode = get_output_mode()

    if not stats:
        print("No statistics available.")
        return

    labels = {
        "total_items": "Total Items",
        "available_items": "Available",
        "overdue_loans": "Overdue",
        "total_members": "Total Members",
    }

    if mode == "json":
        print(json.dumps({key: stats.get(key, 0) for key in labels}, ensure_ascii=False))
    elif mode == "rich":
        content = "\n".join(f"[bold]{label}:[/] {stats.get(key, 0)}" for key, label in labels.items())
        _console.print(Panel.fit(content, title="📊 Library Stats", border_style="blue"))
    else:
        for key, label in labels.items():
            print(f"{label}: {stats.get(key, 0)}")
