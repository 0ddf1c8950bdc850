"""Exceptions raised by circulation operations.

Every message is meant to be shown to the end user as-is.
"""


class CirculationError(Exception):
    """Base exception for circulation errors."""
    pass


class AlreadyCheckedOut(CirculationError):
    """Checkout requested on an item that is already out."""
    pass


class NotCheckedOut(CirculationError):
    """Return requested on an item that is not out."""
    pass


class ItemNotCheckedOut(CirculationError):
    """Reservation requested on an item that is available."""
    pass


class MaxRenewalsReached(CirculationError):
    """The loan has used its only renewal."""
    pass


class AlreadyRenewed(MaxRenewalsReached):
    """Member tried to renew a loan a second time."""
    pass


class HasReservations(CirculationError):
    """Renewal blocked because other members are waiting."""
    pass


class LoanNotFound(CirculationError, LookupError):
    """The item is not among the member's current loans."""
    pass


class LoanAlreadyReturned(CirculationError):
    """The loan has already been finalized."""
    pass


class MemberNotFound(CirculationError, LookupError):
    pass


class ItemNotFound(CirculationError, LookupError):
    pass


class CheckoutDenied(CirculationError):
    """Member is not allowed to check out (loan limit or unpaid fees)."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Checkout denied: {reason}")
        self.reason = reason


class PaymentExceedsBalance(CirculationError):
    pass


class InvalidPayment(CirculationError, ValueError):
    pass


class SeedDataError(CirculationError, ValueError):
    """Seed data could not be loaded."""
    pass
