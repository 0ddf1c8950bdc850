import json
import logging
import sys
from datetime import datetime
from typing import List, Optional

import typer
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from circulation import (
    DEMO_SEED,
    CirculationError,
    FixedClock,
    LibraryItem,
    Library,
    build_library,
    read_seed_file,
)
from config import settings
from utils.activity_log import ActivityLog
from utils.ui_helpers import (
    format_date,
    format_money,
    get_output_mode,
    print_items_result,
    print_members_result,
    print_overdue_result,
    print_stats_result,
    set_output_mode,
)

APP_NAME = settings.app_name

console = Console()
logger = logging.getLogger(__name__)


def configure_logging() -> None:
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


# Single in-memory Library for the process
class LibraryManager:
    _instance: Optional[Library] = None

    @classmethod
    def get_instance(cls) -> Library:
        """Get or build the Library from the configured seed data."""
        if cls._instance is None:
            seed = read_seed_file(settings.seed_file) if settings.seed_file else DEMO_SEED
            cls._instance = build_library(seed, name=settings.library_name)
            logger.info(f"Library instance created: {cls._instance.name}")
        return cls._instance

    @classmethod
    def set_instance(cls, library: Optional[Library]) -> None:
        cls._instance = library

    @classmethod
    def reset(cls) -> None:
        cls._instance = None


# --- Circulation handlers shared by the menu and the demo session ---
# Each one records the outcome in the activity log and returns True on success.

def handle_checkout(lib: Library, log: ActivityLog, member_id: str, item_id: Optional[str]) -> bool:
    if not item_id:
        log.error("Please select an item")
        return False
    try:
        loan = lib.checkout_item(member_id, item_id)
    except CirculationError as e:
        logger.warning(f"Checkout failed: {e}")
        log.error(str(e))
        return False
    item = lib.get_item(loan.item_id)
    member = lib.get_member(loan.member_id)
    log.success(f'Checked out "{item.title}" to {member.name}. Due: {format_date(loan.due_date)}')
    return True


def handle_return(lib: Library, log: ActivityLog, member_id: str, item_id: str) -> bool:
    try:
        loan = lib.return_item(member_id, item_id)
    except CirculationError as e:
        logger.warning(f"Return failed: {e}")
        log.error(str(e))
        return False
    item = lib.get_item(loan.item_id)
    fee_msg = f" Late fee: {format_money(loan.late_fee)}" if loan.late_fee > 0 else ""
    log.success(f'Returned "{item.title}".{fee_msg}')
    return True


def handle_renew(lib: Library, log: ActivityLog, member_id: str, item_id: str) -> bool:
    try:
        loan = lib.renew_item(member_id, item_id)
    except CirculationError as e:
        logger.warning(f"Renewal failed: {e}")
        log.error(str(e))
        return False
    log.success(f"Renewed item successfully. New due date: {format_date(loan.due_date)}")
    return True


def handle_reserve(lib: Library, log: ActivityLog, member_id: str, item_id: str) -> bool:
    try:
        lib.reserve_item(member_id, item_id)
    except CirculationError as e:
        logger.warning(f"Reservation failed: {e}")
        log.error(str(e))
        return False
    log.success(f'Reserved "{lib.get_item(item_id).title}"')
    return True


def handle_pay_fees(lib: Library, log: ActivityLog, member_id: str) -> bool:
    """Pay the member's whole outstanding balance."""
    member = lib.get_member(member_id)
    if member is None:
        log.error(f"Member {member_id} not found")
        return False
    if member.outstanding_fees == 0:
        log.info("No outstanding fees")
        return False
    amount = member.outstanding_fees
    try:
        lib.pay_fees(member_id, amount)
    except CirculationError as e:
        logger.warning(f"Payment failed: {e}")
        log.error(str(e))
        return False
    log.success(f"Paid {format_money(amount)} in fees")
    return True


# --- Typer CLI application ---
app = typer.Typer(help="Library circulation CLI")


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    )
):
    """Global CLI options (e.g. output mode)."""
    configure_logging()
    if output:
        set_output_mode(output)


@app.command("items")
def cli_items():
    """List every item in the catalog."""
    lib = LibraryManager.get_instance()
    print_items_result(list(lib.catalog.values()), title="Catalog")


@app.command("available")
def cli_available():
    """List items that can be checked out now."""
    lib = LibraryManager.get_instance()
    print_items_result(lib.get_available_items(), title="Available", empty_message="No items available.")


@app.command("popular")
def cli_popular():
    """List popular items, most checked out first."""
    lib = LibraryManager.get_instance()
    print_items_result(lib.get_popular_items(), title="Popular", empty_message="No popular items.")


@app.command("overdue")
def cli_overdue():
    """List overdue loans across all members."""
    lib = LibraryManager.get_instance()
    now = lib.clock.now()
    print_overdue_result(lib.get_overdue_items(now), lib.catalog, now)


@app.command("members")
def cli_members():
    """List members with their loans and fees."""
    lib = LibraryManager.get_instance()
    print_members_result(list(lib.members.values()))


@app.command("stats")
def cli_stats():
    """Show library statistics."""
    lib = LibraryManager.get_instance()
    print_stats_result(lib.get_statistics())


@app.command("demo")
def cli_demo(
    start: str = typer.Option("2024-01-01", "--start", help="Date the demo session starts on (YYYY-MM-DD)"),
):
    """Run a scripted circulation session on a fresh demo library."""
    try:
        start_at = datetime.strptime(start, "%Y-%m-%d")
    except ValueError:
        print(f"Invalid start date: {start}. Use YYYY-MM-DD.")
        raise typer.Exit(code=1)
    log = ActivityLog()
    lib = run_demo_session(start_at, log)
    print_activity(log)
    print_stats_result(lib.get_statistics())


def run_demo_session(start_at: datetime, log: ActivityLog) -> Library:
    """Walk through checkout, reservation, renewal, late return and payment."""
    clock = FixedClock(start_at)
    lib = build_library(DEMO_SEED, clock=clock)
    handle_checkout(lib, log, "MEM001", "B005")
    handle_checkout(lib, log, "MEM001", "D001")
    handle_reserve(lib, log, "MEM002", "B005")
    handle_renew(lib, log, "MEM001", "B005")
    handle_renew(lib, log, "MEM001", "D001")
    handle_renew(lib, log, "MEM001", "D001")
    clock.advance(days=19)
    handle_return(lib, log, "MEM001", "B005")
    handle_checkout(lib, log, "MEM001", "B004")
    handle_pay_fees(lib, log, "MEM001")
    handle_checkout(lib, log, "MEM001", "B004")
    return lib


def print_activity(log: ActivityLog) -> None:
    entries = list(log.entries)
    if not entries:
        print("No activity yet")
        return
    if get_output_mode() == "json":
        print(json.dumps([{"message": e.message, "kind": e.kind, "time": e.time.isoformat()} for e in entries],
                         ensure_ascii=False))
        return
    for e in entries:
        print(f"[{e.kind}] {e.message}")


# --- Interactive menu ---

def _choose_member(lib: Library, current: str) -> str:
    ids = list(lib.members)
    for m in lib.members.values():
        console.print(f"  [magenta]{m.id}[/] {escape(m.name)} ({m.membership_type.value})")
    return Prompt.ask("Member ID", choices=ids, default=current if current in ids else ids[0])


def _ask_item(prompt: str) -> str:
    return Prompt.ask(prompt).strip()


def _checked_out_items(lib: Library) -> List[LibraryItem]:
    return [item for item in lib.catalog.values() if item.is_checked_out]


def _render_member(lib: Library, member_id: str) -> None:
    member = lib.get_member(member_id)
    if member is None:
        return
    table = Table(title=f"Current loans: {escape(member.name)}", header_style="bold cyan", box=box.SIMPLE)
    table.add_column("ID", style="magenta")
    table.add_column("Title")
    table.add_column("Due")
    table.add_column("Renewed", justify="right")
    table.add_column("Status")
    now = lib.clock.now()
    for loan in member.current_loans.values():
        item = lib.get_item(loan.item_id)
        status = f"[red]Overdue {loan.get_days_overdue(now)}d[/]" if loan.is_overdue(now) else "[green]On time[/]"
        table.add_row(loan.item_id, escape(item.title) if item else "?", format_date(loan.due_date),
                      str(loan.renewal_count), status)
    eligibility = member.can_checkout()
    can_checkout = "[green]Yes[/]" if eligibility.allowed else f"[red]No ({eligibility.reason})[/]"
    console.print(Panel.fit(
        f"[bold]Membership:[/] {member.membership_type.value}\n"
        f"[bold]Loans:[/] {len(member.current_loans)}/{member.max_loans}\n"
        f"[bold]Can checkout:[/] {can_checkout}\n"
        f"[bold]Outstanding fees:[/] {format_money(member.outstanding_fees)}",
        title=f"👤 {escape(member.name)}",
        border_style="blue",
    ))
    if member.current_loans:
        console.print(table)


def run_menu():
    """Simple interactive menu over one in-memory library."""
    configure_logging()
    lib = LibraryManager.get_instance()
    log = ActivityLog()
    member_id = next(iter(lib.members), "")
    if not member_id:
        console.print("[bold red]No members registered; nothing to do.[/]")
        return

    def render_menu() -> None:
        menu_items = [
            ("1", "Select member", "👤"),
            ("2", "Check out item", "📤"),
            ("3", "Return item", "📥"),
            ("4", "Renew loan", "🔁"),
            ("5", "Reserve item", "📌"),
            ("6", "Pay fees", "💰"),
            ("7", "Available items", "📚"),
            ("8", "Library stats", "📊"),
            ("0", "Exit", "🚪"),
        ]

        table = Table.grid(padding=(0, 2))
        table.add_column(justify="right", style="bold cyan", width=4)
        table.add_column(justify="left", style="white")
        for key, label, icon in menu_items:
            table.add_row(f"[reverse]{key}[/]", f"{icon} {label}")

        panel = Panel(
            table,
            title=f"{APP_NAME} - {escape(lib.name)}",
            border_style="cyan",
            box=box.HEAVY,
            padding=(1, 2),
        )
        console.print(panel)

    while True:
        console.clear()
        render_menu()
        _render_member(lib, member_id)
        log.render(console)
        choice = Prompt.ask("Choose an option", choices=["1", "2", "3", "4", "5", "6", "7", "8", "0"], default="2").strip()

        if choice == "1":
            member_id = _choose_member(lib, member_id)
        elif choice == "2":
            print_items_result(lib.get_available_items(), title="Available", empty_message="No items available.")
            handle_checkout(lib, log, member_id, _ask_item("Item ID to check out"))
        elif choice == "3":
            handle_return(lib, log, member_id, _ask_item("Item ID to return"))
        elif choice == "4":
            handle_renew(lib, log, member_id, _ask_item("Item ID to renew"))
        elif choice == "5":
            print_items_result(_checked_out_items(lib), title="Checked out", empty_message="No items are checked out.")
            handle_reserve(lib, log, member_id, _ask_item("Item ID to reserve"))
        elif choice == "6":
            handle_pay_fees(lib, log, member_id)
        elif choice == "7":
            print_items_result(lib.get_available_items(), title="Available", empty_message="No items available.")
            Prompt.ask("Press enter to continue", default="")
        elif choice == "8":
            print_stats_result(lib.get_statistics())
            Prompt.ask("Press enter to continue", default="")
        elif choice == "0":
            console.print("[green]Goodbye![/]")
            break


if __name__ == "__main__":
    if len(sys.argv) > 1:
        app()
    else:
        run_menu()
