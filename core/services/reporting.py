# core/services/reporting.py

from collections import Counter
from datetime import datetime, UTC
from typing import List, Optional, Tuple

from core.models.library import LibraryReport, OverdueLoan, ReaderAccount
from core.services.accounts import AccountDirectory
from core.services.catalog import Catalog
from core.services.ledger import LendingLedger


class Reporting:
    """Read-only aggregates over the catalog, the ledger and the readers"""

    def __init__(self, catalog: Catalog, ledger: LendingLedger, readers: AccountDirectory):
        self.catalog = catalog
        self.ledger = ledger
        self.readers = readers

    def overdue(self, now: Optional[datetime] = None) -> List[OverdueLoan]:
        """Active loans past their due date. Loans without a timestamp never are."""
        now = now or datetime.now(UTC)
        overdue = []
        for record in self.ledger.active_loans():
            due_at = self.ledger.due_date(record)
            if due_at is not None and due_at < now:
                overdue.append(OverdueLoan(record=record, due_at=due_at))
        return overdue

    def reader_of_the_week(self) -> Optional[ReaderAccount]:
        # Read the store rather than the login snapshot to include other sessions' counts
        readers = self.readers.store.list_accounts()
        if not readers:
            return None
        return max(readers, key=lambda r: r.books_read)

    def most_borrowed(self) -> Optional[Tuple[str, int]]:
        """ISBN with the most borrow events in the reading history, and its count"""
        counts = Counter(entry.isbn for entry in self.ledger.history())
        if not counts:
            return None
        return counts.most_common(1)[0]

    def average_rating(self, isbn: str) -> Optional[float]:
        ratings = [r.rating for r in self.ledger.ratings(isbn)]
        if not ratings:
            return None
        return sum(ratings) / len(ratings)

    def report(self, now: Optional[datetime] = None) -> LibraryReport:
        books = self.catalog.list_books(refresh=True)
        most_borrowed = self.most_borrowed()
        most_borrowed_book = self.catalog.find_by_isbn(most_borrowed[0]) if most_borrowed else None

        return LibraryReport(
            total_books=len(books),
            available_books=sum(1 for b in books if b.available),
            borrowed_books=len(self.ledger.active_loans()),
            overdue_books=len(self.overdue(now)),
            total_readers=len(self.readers.store.list_accounts()),
            total_ratings=len(self.ledger.ratings()),
            total_reviews=len(self.ledger.reviews()),
            most_active_reader=self.reader_of_the_week(),
            most_borrowed_isbn=most_borrowed[0] if most_borrowed else None,
            most_borrowed_title=most_borrowed_book.title if most_borrowed_book else None,
            most_borrowed_count=most_borrowed[1] if most_borrowed else 0,
        )
