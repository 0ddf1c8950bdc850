"""Library circulation core.

- items: catalog entries and their checkout lifecycle (items.py)
- member: borrowers, eligibility and fees (member.py)
- loan / reservation: circulation records (loan.py, reservation.py)
- library: aggregate root and read views (library.py)
- seed: building a Library from seed data (seed.py)
"""

from circulation.clock import Clock, FixedClock, SystemClock
from circulation.errors import (
    AlreadyCheckedOut,
    AlreadyRenewed,
    CheckoutDenied,
    CirculationError,
    HasReservations,
    InvalidPayment,
    ItemNotCheckedOut,
    ItemNotFound,
    LoanAlreadyReturned,
    LoanNotFound,
    MaxRenewalsReached,
    MemberNotFound,
    NotCheckedOut,
    PaymentExceedsBalance,
    SeedDataError,
)
from circulation.items import CheckoutRecord, LibraryItem
from circulation.library import Library, OverdueLoan
from circulation.loan import Loan
from circulation.member import CheckoutEligibility, Member, MembershipType
from circulation.policy import LOAN_POLICIES, ItemType, LoanPolicy
from circulation.reservation import Reservation
from circulation.seed import DEMO_SEED, build_library, load_seed, read_seed_file

__all__ = [
    "Clock", "FixedClock", "SystemClock",
    "CirculationError", "AlreadyCheckedOut", "NotCheckedOut", "ItemNotCheckedOut",
    "MaxRenewalsReached", "AlreadyRenewed", "HasReservations", "LoanNotFound",
    "LoanAlreadyReturned", "MemberNotFound", "ItemNotFound", "CheckoutDenied",
    "PaymentExceedsBalance", "InvalidPayment", "SeedDataError",
    "ItemType", "LoanPolicy", "LOAN_POLICIES",
    "CheckoutRecord", "LibraryItem", "Loan", "Reservation",
    "Member", "MembershipType", "CheckoutEligibility",
    "Library", "OverdueLoan",
    "DEMO_SEED", "build_library", "load_seed", "read_seed_file",
]
