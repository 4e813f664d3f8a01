# tests/test_ledger.py

import pytest

from core.errors import NotBorrowedBySelfError, ValidationError
from core.library import Library
from helpers import write_lines


@pytest.fixture
def borrowing(stocked_library):
    """alice holds Dune"""
    stocked_library.catalog.borrow("978-11111", "alice")
    return stocked_library


def test_rating_requires_active_loan(borrowing):
    """Test that rating a book not currently held fails and writes nothing."""
    ledger = borrowing.ledger
    with pytest.raises(NotBorrowedBySelfError):
        ledger.add_rating("bob", "978-11111", 5)
    with pytest.raises(NotBorrowedBySelfError):
        ledger.add_rating("alice", "978-22222", 5)

    assert ledger.ratings() == []
    assert not borrowing.settings.ledger_file("ratings").exists()


def test_review_requires_active_loan(borrowing):
    ledger = borrowing.ledger
    with pytest.raises(NotBorrowedBySelfError):
        ledger.add_review("bob", "978-11111", "Great")

    assert ledger.reviews() == []
    assert not borrowing.settings.ledger_file("reviews").exists()


def test_returned_book_can_no_longer_be_rated(borrowing):
    """Test that the check is against current loans, not reading history."""
    borrowing.catalog.return_book("978-11111", "alice")
    with pytest.raises(NotBorrowedBySelfError):
        borrowing.ledger.add_rating("alice", "978-11111", 4)


@pytest.mark.parametrize("rating", [0, 6, "five", ""])
def test_rating_out_of_range(borrowing, rating):
    with pytest.raises(ValidationError):
        borrowing.ledger.add_rating("alice", "978-11111", rating)
    assert borrowing.ledger.ratings() == []


def test_rating_and_review_on_held_book(borrowing):
    """Test that a holder can rate and review, matching either ISBN form."""
    ledger = borrowing.ledger
    rating = ledger.add_rating("alice", "11111", " 4 ")
    review = ledger.add_review("alice", "978-11111", "Long, but worth it")

    assert rating.isbn == "978-11111"
    assert rating.rating == 4
    assert [r.rating for r in ledger.ratings("978-11111")] == [4]
    assert [r.text for r in ledger.reviews("11111")] == ["Long, but worth it"]
    assert review.username == "alice"


def test_blank_review_rejected(borrowing):
    with pytest.raises(ValidationError):
        borrowing.ledger.add_review("alice", "978-11111", "   ")


def test_favorites_copy_book_details(borrowing):
    favorite = borrowing.ledger.add_favorite("alice", "978-11111")

    assert (favorite.title, favorite.author) == ("Dune", "Frank Herbert")
    assert borrowing.ledger.favorites_of("alice") == [favorite]
    assert borrowing.ledger.favorites_of("bob") == []


def test_legacy_review_with_unquoted_commas(settings):
    """Test that review text split on stray commas is joined back together."""
    write_lines(settings.ledger_file("reviews"), [
        "username,isbn,review_text",
        "alice,978-11111,Slow start, great ending",
    ])
    library = Library(settings)

    assert [r.text for r in library.ledger.reviews()] == ["Slow start, great ending"]


def test_loan_timestamps_and_due_dates(borrowing):
    record = borrowing.ledger.loan_for("978-11111")

    assert record.username == "alice"
    assert record.borrowed_at is not None
    assert borrowing.ledger.due_date(record) > record.borrowed_at
    assert borrowing.ledger.loan_for("978-22222") is None
