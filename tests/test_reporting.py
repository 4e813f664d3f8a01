# tests/test_reporting.py

from datetime import datetime, timedelta, UTC


def test_empty_library_report(library):
    """Test that an empty library reports zeros and no leaders."""
    report = library.reports.report()

    assert report.total_books == 0
    assert report.borrowed_books == 0
    assert report.most_active_reader is None
    assert report.most_borrowed_isbn is None
    assert library.reports.reader_of_the_week() is None
    assert library.reports.average_rating("978-11111") is None


def test_overdue_loans(stocked_library):
    """Test that only loans past the loan period are overdue."""
    now = datetime.now(UTC)
    catalog = stocked_library.catalog
    catalog.borrow("978-11111", "alice", now=now - timedelta(days=30))
    catalog.borrow("978-22222", "bob", now=now - timedelta(days=3))

    overdue = stocked_library.reports.overdue(now)

    assert [o.record.isbn for o in overdue] == ["978-11111"]
    assert overdue[0].due_at == now - timedelta(days=16)


def test_reader_of_the_week(stocked_library):
    """Test that the reader with the highest count wins."""
    catalog = stocked_library.catalog
    catalog.read_book("978-11111", "bob")
    catalog.read_book("978-22222", "bob")
    catalog.read_book("978-33333", "alice")

    winner = stocked_library.reports.reader_of_the_week()

    assert winner.username == "bob"
    assert winner.books_read == 2


def test_report_figures(stocked_library):
    """Test the aggregates shown on the report screen."""
    now = datetime.now(UTC)
    catalog = stocked_library.catalog
    catalog.borrow("978-11111", "alice", now=now - timedelta(days=20))
    catalog.return_book("978-11111", "alice")
    catalog.borrow("978-11111", "bob", now=now - timedelta(days=20))
    catalog.borrow("978-22222", "alice", now=now)
    stocked_library.ledger.add_rating("bob", "978-11111", 4)
    stocked_library.ledger.add_rating("bob", "978-11111", 2)
    stocked_library.ledger.add_review("alice", "978-22222", "Witty")

    report = stocked_library.reports.report(now)

    assert report.total_books == 3
    assert report.available_books == 1
    assert report.borrowed_books == 2
    assert report.overdue_books == 1
    assert report.total_readers == 2
    assert report.total_ratings == 2
    assert report.total_reviews == 1
    assert report.most_borrowed_isbn == "978-11111"
    assert report.most_borrowed_title == "Dune"
    assert report.most_borrowed_count == 2
    assert report.most_active_reader.username == "alice"
    assert stocked_library.reports.average_rating("978-11111") == 3.0
