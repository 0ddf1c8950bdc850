from datetime import datetime

import pytest

from circulation import FixedClock, Library, LibraryItem, Member


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 1, 1))


@pytest.fixture
def lib(clock):
    # Fresh library per test so catalog and member state never leak
    library = Library("Test Library", clock=clock)
    library.add_item(LibraryItem.book("B001", "Test Book", "Author", "123-456"))
    library.add_item(LibraryItem.dvd("D001", "Test DVD", "Director", 120))
    library.add_item(LibraryItem.magazine("M001", "Test Magazine", "Issue 1", "2024-01"))
    library.add_member(Member("MEM001", "Standard Member", "standard"))
    library.add_member(Member("MEM002", "Premium Member", "premium"))
    yield library


@pytest.fixture
def book():
    return LibraryItem.book("B001", "Test Book", "Author", "123-456")


@pytest.fixture
def dvd():
    return LibraryItem.dvd("D001", "Test DVD", "Director", 120)


@pytest.fixture
def magazine():
    return LibraryItem.magazine("M001", "Test Magazine", "Issue 1", "2024-01")
