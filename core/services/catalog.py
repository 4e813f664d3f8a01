# core/services/catalog.py

import logging
from datetime import datetime, UTC
from typing import List, Optional

from core.errors import (
    AccountNotFoundError, AlreadyExistsError, BookNotFoundError, NotAvailableError,
    StorageError, SubmissionNotFoundError, ValidationError
)
from core.isbn import isbn_candidates, normalize_isbn
from core.models.library import Book, BorrowReceipt, BorrowRecord, ReaderAccount, Submission
from core.services.accounts import AccountDirectory
from core.services.ledger import LendingLedger
from core.storage.base import Storage

logger = logging.getLogger(__name__)


def _required(value: Optional[str], field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field} is required")
    return value


class Catalog:
    """The set of books, with availability derived from the lending ledger.

    Listing re-reads the store so changes written by another process show
    up; lookups use the copy from the last load unless asked to refresh.
    """

    def __init__(self, storage: Storage, ledger: LendingLedger, readers: AccountDirectory):
        self.storage = storage
        self.store = storage.catalog
        self.ledger = ledger
        self.readers = readers
        self._books: List[Book] = []

    def load(self) -> List[Book]:
        self._books = self.ledger.apply_loan_state(self.store.list_books())
        return list(self._books)

    def list_books(self, refresh: bool = True) -> List[Book]:
        if refresh:
            return self.load()
        return list(self._books)

    def find_by_isbn(self, isbn: str, refresh: bool = False) -> Optional[Book]:
        books = self.load() if refresh else self._books
        for key in isbn_candidates(isbn):
            for book in books:
                if book.isbn == key:
                    return book
        return None

    def search(self, query: str, refresh: bool = True) -> List[Book]:
        """Case-insensitive substring match on title, author or ISBN"""
        needle = (query or "").strip().lower()
        if not needle:
            return []
        books = self.load() if refresh else self._books
        return [
            book for book in books
            if needle in book.title.lower()
            or needle in book.author.lower()
            or needle in book.isbn.lower()
        ]

    def is_available(self, isbn: str) -> bool:
        return self.ledger.loan_for(isbn) is None

    def _require_book(self, isbn: str) -> Book:
        book = self.find_by_isbn(isbn, refresh=True)
        if book is None:
            raise BookNotFoundError(isbn)
        return book

    # Curation

    def add(self, title: str, author: str, isbn: str) -> Book:
        """Add a book under its canonical ISBN.

        Raises:
            ValidationError: If a field is blank or the ISBN is malformed.
            AlreadyExistsError: If the canonical ISBN is already in the catalog.
        """
        title = _required(title, "Title")
        author = _required(author, "Author")
        isbn = normalize_isbn(_required(isbn, "ISBN"))
        if self.find_by_isbn(isbn, refresh=True) is not None:
            raise AlreadyExistsError(isbn, kind="ISBN")

        book = Book(title=title, author=author, isbn=isbn, available=True)
        self.store.add_book(book)
        logger.info("Added %s (%s)", isbn, title)
        self.load()
        return book

    def remove_by_isbn(self, isbn: str) -> bool:
        """Remove the first matching book. Ledger rows for it are left in place."""
        book = self.find_by_isbn(isbn, refresh=True)
        if book is None:
            return False
        removed = self.store.remove_book(book.isbn)
        if removed:
            logger.info("Removed %s from the catalog", book.isbn)
        self.load()
        return removed

    def update_info(self, isbn: str, new_title: Optional[str] = None,
                    new_author: Optional[str] = None) -> Book:
        """Change title and/or author; blank values keep the current one"""
        book = self._require_book(isbn)
        changes = {}
        if new_title and new_title.strip():
            changes["title"] = new_title.strip()
        if new_author and new_author.strip():
            changes["author"] = new_author.strip()
        if not changes:
            return book

        updated = book.model_copy(update=changes)
        if not self.store.update_book(book.isbn, updated):
            raise BookNotFoundError(isbn)
        self.load()
        return updated

    # Lending

    def borrow(self, isbn: str, username: str, now: Optional[datetime] = None) -> BorrowReceipt:
        """Lend a book to a reader.

        Records the loan and its history entry, bumps the reader's count and
        rewrites the catalog's loan columns as one transaction.

        Raises:
            BookNotFoundError: If no book matches the ISBN.
            NotAvailableError: If the book is already on loan.
            AccountNotFoundError: If the reader does not exist.
        """
        book = self._require_book(isbn)
        if not book.available:
            raise NotAvailableError(book.isbn, book.title)
        if self.readers.get(username) is None:
            raise AccountNotFoundError(username)

        now = now or datetime.now(UTC)
        try:
            with self.storage.transaction():
                record = self.ledger.open_loan(username, book, now)
                self.readers.increment_books_read(username)
                self.ledger.sync_catalog()
        except StorageError:
            self.readers.reload()
            raise
        self.load()
        return BorrowReceipt(
            book=self.find_by_isbn(book.isbn) or book,
            borrowed_at=now,
            due_at=self.ledger.due_date(record),
        )

    def return_book(self, isbn: str, username: str) -> BorrowRecord:
        """Give a borrowed book back.

        Raises:
            NoSuchBorrowRecordError: If the reader does not hold that ISBN.
        """
        with self.storage.transaction():
            record = self.ledger.close_loan(username, isbn)
            self.ledger.sync_catalog()
        self.load()
        return record

    def read_book(self, isbn: str, username: str) -> ReaderAccount:
        """Read an available book in the library; counts toward the reader's total"""
        book = self._require_book(isbn)
        if not book.available:
            raise NotAvailableError(book.isbn, book.title)
        return self.readers.increment_books_read(username)

    # Submissions

    def submit(self, username: str, title: str, author: str, isbn: str,
               now: Optional[datetime] = None) -> Submission:
        submission = Submission(
            username=username,
            title=_required(title, "Title"),
            author=_required(author, "Author"),
            isbn=normalize_isbn(_required(isbn, "ISBN")),
            submitted_at=now or datetime.now(UTC),
        )
        self.ledger.add_submission(submission)
        logger.info("%s submitted %s for approval", username, submission.isbn)
        return submission

    def list_submissions(self) -> List[Submission]:
        return self.ledger.submissions()

    def approve_submission(self, isbn: str) -> Book:
        """Move a pending submission into the catalog"""
        pending = next(
            (s for s in self.ledger.submissions() if s.isbn in isbn_candidates(isbn)),
            None,
        )
        if pending is None:
            raise SubmissionNotFoundError(isbn)
        if self.find_by_isbn(pending.isbn, refresh=True) is not None:
            raise AlreadyExistsError(pending.isbn, kind="ISBN")

        book = Book(title=pending.title, author=pending.author, isbn=pending.isbn, available=True)
        with self.storage.transaction():
            self.ledger.remove_submission(pending.isbn)
            self.store.add_book(book)
        self.load()
        return book

    def reject_submission(self, isbn: str) -> Submission:
        submission = self.ledger.remove_submission(isbn)
        if submission is None:
            raise SubmissionNotFoundError(isbn)
        return submission
