# core/services/ledger.py

import logging
from datetime import datetime, timedelta, UTC
from typing import Dict, List, Optional, Union

from core.errors import NoSuchBorrowRecordError, NotBorrowedBySelfError, ValidationError
from core.isbn import isbn_candidates
from core.models.library import (
    Book, BorrowRecord, Favorite, HistoryEntry, Rating, Review, Submission
)
from core.storage.base import Storage

logger = logging.getLogger(__name__)


class LendingLedger:
    """Owns the borrow state of every book plus the per-reader logs.

    A book is on loan exactly when an active borrow record exists for its
    ISBN; catalog availability is derived from here and only cached in the
    catalog store.
    """

    def __init__(self, storage: Storage, loan_days: int = 14):
        self.storage = storage
        self.store = storage.ledger
        self.loan_period = timedelta(days=loan_days)

    # Reads

    def borrowed_books_of(self, username: str) -> List[BorrowRecord]:
        return self.store.list_borrows(username)

    def history_of(self, username: str) -> List[HistoryEntry]:
        return self.store.list_history(username)

    def favorites_of(self, username: str) -> List[Favorite]:
        return self.store.list_favorites(username)

    def active_loans(self) -> List[BorrowRecord]:
        return self.store.list_borrows()

    def loan_for(self, isbn: str) -> Optional[BorrowRecord]:
        keys = set(isbn_candidates(isbn))
        for record in self.store.list_borrows():
            if record.isbn in keys:
                return record
        return None

    def due_date(self, record: BorrowRecord) -> Optional[datetime]:
        if record.borrowed_at is None:
            return None
        return record.borrowed_at + self.loan_period

    def ratings(self, isbn: Optional[str] = None) -> List[Rating]:
        ratings = self.store.list_ratings()
        if isbn is None:
            return ratings
        keys = set(isbn_candidates(isbn))
        return [r for r in ratings if r.isbn in keys]

    def reviews(self, isbn: Optional[str] = None) -> List[Review]:
        reviews = self.store.list_reviews()
        if isbn is None:
            return reviews
        keys = set(isbn_candidates(isbn))
        return [r for r in reviews if r.isbn in keys]

    def history(self) -> List[HistoryEntry]:
        return self.store.list_history()

    # Loans

    def open_loan(self, username: str, book: Book, now: Optional[datetime] = None) -> BorrowRecord:
        """Append the borrow record and its history entry.

        Callers check availability first and run this inside a storage
        transaction together with the other effects of a borrow.
        """
        now = now or datetime.now(UTC)
        record = BorrowRecord(
            username=username, title=book.title, author=book.author,
            isbn=book.isbn, borrowed_at=now,
        )
        self.store.add_borrow(record)
        self.store.add_history(HistoryEntry(
            username=username, title=book.title, author=book.author,
            isbn=book.isbn, timestamp=now,
        ))
        logger.info("Opened loan of %s to %s", book.isbn, username)
        return record

    def close_loan(self, username: str, isbn: str) -> BorrowRecord:
        """Remove the (username, isbn) borrow record, leaving every other row alone.

        Raises:
            NoSuchBorrowRecordError: If the user holds no such book.
        """
        record = self.holding(username, isbn)
        if record is None or not self.store.remove_borrow(username, record.isbn):
            raise NoSuchBorrowRecordError(username, isbn)
        logger.info("Closed loan of %s from %s", record.isbn, username)
        return record

    def apply_loan_state(self, books: List[Book]) -> List[Book]:
        """Return copies of ``books`` with availability taken from the active loans"""
        loans: Dict[str, BorrowRecord] = {}
        for record in self.store.list_borrows():
            loans.setdefault(record.isbn, record)

        result = []
        for book in books:
            record = next((loans[k] for k in isbn_candidates(book.isbn) if k in loans), None)
            result.append(book.model_copy(update={
                "available": record is None,
                "borrowed_by": record.username if record else None,
                "due_date": self.due_date(record) if record else None,
            }))
        return result

    def sync_catalog(self) -> None:
        """Write the derived loan state back into the catalog store"""
        catalog = self.storage.catalog
        catalog.save_loan_state(self.apply_loan_state(catalog.list_books()))

    # Reader logs

    def holding(self, username: str, isbn: str) -> Optional[BorrowRecord]:
        """The borrow record ``username`` holds for ``isbn``, if any"""
        keys = set(isbn_candidates(isbn))
        for record in self.store.list_borrows(username):
            if record.isbn in keys:
                return record
        return None

    def _require_held(self, username: str, isbn: str) -> BorrowRecord:
        record = self.holding(username, isbn)
        if record is None:
            raise NotBorrowedBySelfError(username, isbn)
        return record

    def add_rating(self, username: str, isbn: str, rating: Union[int, str]) -> Rating:
        record = self._require_held(username, isbn)
        try:
            value = int(str(rating).strip())
        except ValueError:
            value = 0
        if not 1 <= value <= 5:
            raise ValidationError("Rating must be a whole number from 1 to 5")
        entry = Rating(username=username, isbn=record.isbn, rating=value)
        self.store.add_rating(entry)
        return entry

    def add_review(self, username: str, isbn: str, text: str) -> Review:
        record = self._require_held(username, isbn)
        text = (text or "").strip()
        if not text:
            raise ValidationError("Review text cannot be empty")
        entry = Review(username=username, isbn=record.isbn, text=text)
        self.store.add_review(entry)
        return entry

    def add_favorite(self, username: str, isbn: str) -> Favorite:
        record = self._require_held(username, isbn)
        entry = Favorite(username=username, title=record.title, author=record.author, isbn=record.isbn)
        self.store.add_favorite(entry)
        return entry

    # Submissions

    def submissions(self) -> List[Submission]:
        return self.store.list_submissions()

    def add_submission(self, submission: Submission) -> None:
        self.store.add_submission(submission)

    def remove_submission(self, isbn: str) -> Optional[Submission]:
        return self.store.remove_submission(isbn)

    # Cascades

    def rename_user(self, old: str, new: str) -> List[str]:
        touched = self.store.rename_user(old, new)
        if touched:
            self.sync_catalog()
        logger.info("Renamed %s to %s in %s", old, new, touched or "no ledger logs")
        return touched

    def purge_user(self, username: str) -> List[str]:
        touched = self.store.purge_user(username)
        if "borrowed_books" in touched:
            self.sync_catalog()
        logger.info("Purged %s from %s", username, touched or "no ledger logs")
        return touched
