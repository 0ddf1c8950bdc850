import pytest
from datetime import datetime, timedelta
from decimal import Decimal

from circulation import CheckoutRecord, LoanAlreadyReturned, MaxRenewalsReached
from circulation.loan import Loan


def test_due_date_uses_loan_period(book, dvd, magazine):
    start = datetime(2024, 1, 1)
    assert Loan.open(book, "MEM001", start).due_date == datetime(2024, 1, 15)
    assert Loan.open(dvd, "MEM001", start).due_date == datetime(2024, 1, 8)
    assert Loan.open(magazine, "MEM001", start).due_date == datetime(2024, 1, 4)


def test_due_date_crosses_month_and_leap_day(book):
    loan = Loan.open(book, "MEM001", datetime(2024, 2, 20))
    assert loan.due_date == datetime(2024, 3, 5)


def test_loan_period_is_fixed_at_checkout(book):
    loan = book.checkout("MEM001", datetime(2024, 1, 1))
    for i in range(11):
        book.checkout_history.append(CheckoutRecord(f"M{i}", datetime(2024, 1, 1)))
    assert book.get_loan_period() == 12
    assert loan.due_date == datetime(2024, 1, 15)


def test_is_overdue_is_strict(book):
    loan = Loan.open(book, "MEM001", datetime(2024, 1, 1))
    assert loan.is_overdue(datetime(2024, 1, 15)) is False
    assert loan.is_overdue(datetime(2024, 1, 15, 0, 0, 1)) is True


def test_days_overdue_rounds_partial_days_up(book):
    loan = Loan.open(book, "MEM001", datetime(2024, 1, 1))
    assert loan.get_days_overdue(datetime(2024, 1, 10)) == 0
    assert loan.get_days_overdue(datetime(2024, 1, 15, 1)) == 1
    assert loan.get_days_overdue(datetime(2024, 1, 17)) == 2
    assert loan.get_days_overdue(datetime(2024, 1, 17, 12)) == 3


def test_late_fee_for_late_return(book):
    loan = book.checkout("MEM001", datetime(2024, 1, 1))
    book.return_item(datetime(2024, 1, 20))
    assert loan.late_fee == 50
    assert loan.late_fee == Decimal("50.00")


def test_no_late_fee_for_early_return(book):
    loan = book.checkout("MEM001", datetime(2024, 1, 1))
    book.return_item(datetime(2024, 1, 10))
    assert loan.late_fee == 0


def test_calculate_late_fee_per_type(dvd, magazine):
    dvd_loan = Loan.open(dvd, "MEM001", datetime(2024, 1, 1))
    magazine_loan = Loan.open(magazine, "MEM001", datetime(2024, 1, 1))
    assert dvd_loan.calculate_late_fee(datetime(2024, 1, 10)) == Decimal("20.00")
    assert magazine_loan.calculate_late_fee(datetime(2024, 1, 5)) == 10


def test_returned_loan_is_never_overdue(book):
    loan = book.checkout("MEM001", datetime(2024, 1, 1))
    book.return_item(datetime(2024, 1, 20))
    assert loan.is_overdue(datetime(2024, 2, 1)) is False
    assert loan.get_days_overdue(datetime(2024, 2, 1)) == 0


def test_process_return_is_terminal(book):
    loan = Loan.open(book, "MEM001", datetime(2024, 1, 1))
    loan.process_return(datetime(2024, 1, 20))
    with pytest.raises(LoanAlreadyReturned):
        loan.process_return(datetime(2024, 2, 1))
    assert loan.return_date == datetime(2024, 1, 20)
    assert loan.late_fee == 50


def test_renew_extends_from_current_due_date(book):
    loan = Loan.open(book, "MEM001", datetime(2024, 1, 1))
    loan.renew(book.get_loan_period())
    assert loan.renewal_count == 1
    assert loan.due_date == datetime(2024, 1, 1) + timedelta(days=28)


def test_second_renewal_fails(book):
    loan = Loan.open(book, "MEM001", datetime(2024, 1, 1))
    loan.renew(14)
    with pytest.raises(MaxRenewalsReached, match="Maximum renewals reached"):
        loan.renew(14)
    assert loan.renewal_count == 1
    assert loan.due_date == datetime(2024, 1, 29)


def test_renew_returned_loan_fails(book):
    loan = Loan.open(book, "MEM001", datetime(2024, 1, 1))
    loan.process_return(datetime(2024, 1, 3))
    with pytest.raises(LoanAlreadyReturned):
        loan.renew(14)


def test_to_dict(book):
    loan = Loan.open(book, "MEM001", datetime(2024, 1, 1))
    data = loan.to_dict()
    assert data["due_date"] == "2024-01-15T00:00:00"
    assert data["return_date"] is None
    assert data["late_fee"] == "0.00"
