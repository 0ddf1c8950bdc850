import pytest
from datetime import datetime
from decimal import Decimal

from circulation import (
    CheckoutDenied,
    CheckoutRecord,
    ItemNotFound,
    Library,
    LibraryItem,
    LoanNotFound,
    Member,
    MemberNotFound,
    OverdueLoan,
    PaymentExceedsBalance,
    SystemClock,
)


def _popularize(item, count):
    for i in range(count):
        item.checkout_history.append(CheckoutRecord(f"M{i}", datetime(2023, 6, 1)))


def test_add_and_get(lib):
    assert lib.get_item("B001").title == "Test Book"
    assert lib.get_member("MEM002").name == "Premium Member"
    assert lib.get_item("nope") is None
    assert lib.get_member("nope") is None


def test_add_overwrites_duplicate_ids(lib):
    lib.add_item(LibraryItem.book("B001", "Replacement", "Someone", "999"))
    lib.add_member(Member("MEM001", "Renamed"))
    assert len(lib.catalog) == 3
    assert lib.get_item("B001").title == "Replacement"
    assert lib.get_member("MEM001").name == "Renamed"


def test_default_clock_is_system_clock():
    assert isinstance(Library("Anywhere").clock, SystemClock)


def test_checkout_uses_clock_by_default(lib, clock):
    loan = lib.checkout_item("MEM001", "B001")
    assert loan.checkout_date == clock.now()
    assert loan.due_date == datetime(2024, 1, 15)


def test_checkout_with_explicit_date(lib):
    loan = lib.checkout_item("MEM001", "D001", datetime(2024, 3, 1))
    assert loan.due_date == datetime(2024, 3, 8)


def test_checkout_unknown_member(lib):
    with pytest.raises(MemberNotFound, match="Member MEM404 not found"):
        lib.checkout_item("MEM404", "B001")
    item = lib.get_item("B001")
    assert item.is_checked_out is False
    assert item.total_checkouts == 0


def test_unknown_member_reported_before_unknown_item(lib):
    with pytest.raises(MemberNotFound):
        lib.checkout_item("MEM404", "X404")


def test_checkout_unknown_item(lib):
    with pytest.raises(ItemNotFound, match="Item X404 not found"):
        lib.checkout_item("MEM001", "X404")
    assert lib.get_member("MEM001").current_loans == {}


def test_not_found_errors_are_lookup_errors(lib):
    with pytest.raises(LookupError):
        lib.return_item("MEM001", "X404")


def test_checkout_return_round_trip(lib, clock):
    lib.checkout_item("MEM001", "B001")
    clock.advance(days=19)
    loan = lib.return_item("MEM001", "B001")

    item = lib.get_item("B001")
    assert item.is_checked_out is False
    assert item.current_loan is None
    assert loan.return_date == datetime(2024, 1, 20)
    assert loan.late_fee == 50
    assert lib.get_member("MEM001").outstanding_fees == 50


def test_return_by_wrong_member(lib):
    lib.checkout_item("MEM001", "B001")
    with pytest.raises(LoanNotFound):
        lib.return_item("MEM002", "B001")
    assert lib.get_item("B001").is_checked_out is True


def test_renew_reserve_and_pay_by_id(lib, clock):
    lib.checkout_item("MEM001", "B001")
    loan = lib.renew_item("MEM001", "B001")
    assert loan.due_date == datetime(2024, 1, 29)

    reservation = lib.reserve_item("MEM002", "B001")
    assert reservation.reservation_date == clock.now()

    clock.set(datetime(2024, 2, 1))
    lib.return_item("MEM001", "B001")
    assert reservation.notified is True
    assert lib.get_member("MEM001").outstanding_fees == 30

    assert lib.pay_fees("MEM001", 10) == 20
    with pytest.raises(PaymentExceedsBalance):
        lib.pay_fees("MEM001", 25)
    with pytest.raises(MemberNotFound):
        lib.pay_fees("MEM404", 1)


def test_fee_threshold_blocks_checkout_until_paid(lib, clock):
    lib.checkout_item("MEM001", "M001")
    clock.advance(days=5)
    lib.return_item("MEM001", "M001")
    assert lib.get_member("MEM001").outstanding_fees == 20

    with pytest.raises(CheckoutDenied, match="fees exceed threshold"):
        lib.checkout_item("MEM001", "B001")

    lib.pay_fees("MEM001", Decimal("10"))
    assert lib.checkout_item("MEM001", "B001").member_id == "MEM001"


def test_reservation_fifo_through_library(lib):
    lib.add_member(Member("MEM003", "Third Member"))
    lib.checkout_item("MEM001", "B001")
    first = lib.reserve_item("MEM002", "B001")
    second = lib.reserve_item("MEM003", "B001")

    lib.return_item("MEM001", "B001")

    item = lib.get_item("B001")
    assert first.notified is True
    assert second.notified is False
    assert item.reservations[0] is second


def test_overdue_items(lib, clock):
    lib.checkout_item("MEM001", "B001")
    lib.checkout_item("MEM002", "D001")
    lib.checkout_item("MEM002", "M001")

    assert lib.get_overdue_items() == []

    clock.advance(days=10)
    overdue = lib.get_overdue_items()
    assert [(o.member.id, o.loan.item_id) for o in overdue] == [("MEM002", "D001"), ("MEM002", "M001")]
    assert isinstance(overdue[0], OverdueLoan)

    assert len(lib.get_overdue_items(datetime(2024, 1, 16))) == 3


def test_available_items_in_catalog_order(lib):
    lib.checkout_item("MEM001", "D001")
    assert [i.id for i in lib.get_available_items()] == ["B001", "M001"]


def test_popular_items_sorted_by_checkouts(lib):
    _popularize(lib.get_item("B001"), 12)
    _popularize(lib.get_item("D001"), 15)
    _popularize(lib.get_item("M001"), 10)

    assert [i.id for i in lib.get_popular_items()] == ["D001", "B001"]


def test_popular_items_ties_keep_catalog_order(lib):
    for item_id in ("B001", "D001", "M001"):
        _popularize(lib.get_item(item_id), 11)
    assert [i.id for i in lib.get_popular_items()] == ["B001", "D001", "M001"]


def test_statistics(lib, clock):
    lib.checkout_item("MEM001", "D001")
    clock.advance(days=8)
    assert lib.get_statistics() == {
        "total_items": 3,
        "available_items": 2,
        "overdue_loans": 1,
        "total_members": 2,
    }
