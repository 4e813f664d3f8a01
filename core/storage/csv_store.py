# core/storage/csv_store.py
import logging
from datetime import datetime, UTC
from typing import List, Optional

from core.config import Settings
from core.isbn import isbn_candidates
from core.models.library import (
    Book, BorrowRecord, Favorite, HistoryEntry, LibrarianAccount, Rating,
    ReaderAccount, Review, Submission
)
from core.storage.base import AccountStore, CatalogStore, LedgerStore, LEDGER_LOGS, Storage
from core.storage.records import RawRecord, RecordStore, Row

logger = logging.getLogger(__name__)

BOOK_HEADER = ["title", "author", "isbn", "available", "borrowedBy", "dueDate"]
READER_HEADER = ["username", "password", "numberOfBooksRead"]
LIBRARIAN_HEADER = ["username", "password"]

LEDGER_HEADERS = {
    "borrowed_books": ["username", "title", "author", "isbn", "timestamp"],
    "reading_history": ["username", "title", "author", "isbn", "timestamp"],
    "ratings": ["username", "isbn", "rating"],
    "favorites": ["username", "title", "author", "isbn"],
    "reviews": ["username", "isbn", "review_text"],
    "submissions": ["username", "title", "author", "isbn", "timestamp"],
}

LEDGER_MIN_COLUMNS = {
    "borrowed_books": 4,
    "reading_history": 4,
    "ratings": 3,
    "favorites": 4,
    "reviews": 3,
    "submissions": 4,
}


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; unparseable or empty values become None"""
    value = (value or "").strip()
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        logger.debug("Ignoring unparseable timestamp %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_timestamp(value: Optional[datetime]) -> str:
    return value.isoformat() if value else ""


def _field(row: Row, index: int) -> str:
    return row[index].strip() if len(row) > index else ""


def _owner(record: RawRecord) -> str:
    return record.fields[0].strip() if record.fields else ""


class CsvCatalogStore(CatalogStore):
    """books.csv: title,author,isbn,available[,borrowedBy,dueDate]"""

    def __init__(self, records: RecordStore, path):
        self.records = records
        self.path = path

    @staticmethod
    def _parse(row: Row) -> Book:
        return Book(
            title=row[0].strip(),
            author=row[1].strip(),
            isbn=row[2].strip(),
            available=row[3].strip().upper() == "TRUE",
            borrowed_by=_field(row, 4) or None,
            due_date=parse_timestamp(_field(row, 5)),
        )

    @staticmethod
    def _format(book: Book) -> Row:
        return [
            book.title,
            book.author,
            book.isbn,
            "TRUE" if book.available else "FALSE",
            book.borrowed_by or "",
            format_timestamp(book.due_date),
        ]

    def _load(self, for_update: bool = False) -> List[Book]:
        return self.records.load_all(self.path, 4, self._parse, for_update=for_update)

    def _save(self, books: List[Book]) -> None:
        self.records.rewrite_all(self.path, BOOK_HEADER, [self._format(b) for b in books])

    def list_books(self) -> List[Book]:
        return self._load()

    def add_book(self, book: Book) -> None:
        self.records.append_row(self.path, BOOK_HEADER, self._format(book))

    def remove_book(self, isbn: str) -> bool:
        books = self._load(for_update=True)
        for index, book in enumerate(books):
            if book.isbn == isbn:
                del books[index]
                self._save(books)
                return True
        return False

    def update_book(self, isbn: str, book: Book) -> bool:
        books = self._load(for_update=True)
        for index, existing in enumerate(books):
            if existing.isbn == isbn:
                books[index] = book
                self._save(books)
                return True
        return False

    def save_loan_state(self, books: List[Book]) -> None:
        by_isbn = {book.isbn: book for book in books}
        current = self._load(for_update=True)
        updated = []
        for book in current:
            state = by_isbn.get(book.isbn)
            if state is not None:
                book = book.model_copy(update={
                    "available": state.available,
                    "borrowed_by": state.borrowed_by,
                    "due_date": state.due_date,
                })
            updated.append(book)
        self._save(updated)


class CsvAccountStore(AccountStore):
    """user.csv or librarian.csv"""

    def __init__(self, records: RecordStore, path, kind: str):
        self.records = records
        self.path = path
        self.kind = kind
        self.header = READER_HEADER if kind == "reader" else LIBRARIAN_HEADER

    def _parse(self, row: Row):
        if self.kind == "reader":
            try:
                books_read = int(row[2].strip())
            except ValueError:
                books_read = 0
            return ReaderAccount(username=row[0], password=row[1], books_read=max(books_read, 0))
        return LibrarianAccount(username=row[0], password=row[1])

    def _format(self, account) -> Row:
        if self.kind == "reader":
            return [account.username, account.password, str(account.books_read)]
        return [account.username, account.password]

    def _load(self, for_update: bool = False):
        return self.records.load_all(self.path, len(self.header), self._parse, for_update=for_update)

    def list_accounts(self):
        return self._load()

    def add_account(self, account) -> None:
        self.records.append_row(self.path, self.header, self._format(account))

    def update_account(self, username: str, account) -> bool:
        accounts = self._load(for_update=True)
        for index, existing in enumerate(accounts):
            if existing.username == username:
                accounts[index] = account
                self.records.rewrite_all(self.path, self.header, [self._format(a) for a in accounts])
                return True
        return False

    def delete_account(self, username: str) -> bool:
        accounts = self._load(for_update=True)
        remaining = [a for a in accounts if a.username != username]
        if len(remaining) == len(accounts):
            return False
        self.records.rewrite_all(self.path, self.header, [self._format(a) for a in remaining])
        return True


class CsvLedgerStore(LedgerStore):
    """The per-user logs under library-data/"""

    def __init__(self, records: RecordStore, settings: Settings):
        self.records = records
        self.paths = {name: settings.ledger_file(name) for name in LEDGER_LOGS}

    def _load(self, name: str, parse, username: Optional[str] = None) -> list:
        entries = self.records.load_all(self.paths[name], LEDGER_MIN_COLUMNS[name], parse)
        if username is None:
            return entries
        return [e for e in entries if e.username == username]

    def _append(self, name: str, row: Row) -> None:
        self.records.append_row(self.paths[name], LEDGER_HEADERS[name], row)

    def _raw_rows(self, name: str) -> List[RawRecord]:
        return self.records.load_records(self.paths[name])

    def _rewrite(self, name: str, rows: list) -> None:
        self.records.rewrite_all(self.paths[name], LEDGER_HEADERS[name], rows)

    @staticmethod
    def _parse_borrow(row: Row) -> BorrowRecord:
        return BorrowRecord(
            username=row[0].strip(),
            title=row[1].strip(),
            author=row[2].strip(),
            isbn=row[3].strip(),
            borrowed_at=parse_timestamp(_field(row, 4)),
        )

    @staticmethod
    def _parse_history(row: Row) -> HistoryEntry:
        return HistoryEntry(
            username=row[0].strip(),
            title=row[1].strip(),
            author=row[2].strip(),
            isbn=row[3].strip(),
            timestamp=parse_timestamp(_field(row, 4)),
        )

    @staticmethod
    def _parse_rating(row: Row) -> Rating:
        return Rating(username=row[0].strip(), isbn=row[1].strip(), rating=int(row[2].strip()))

    @staticmethod
    def _parse_review(row: Row) -> Review:
        # Legacy files hold unquoted commas inside the review text
        return Review(username=row[0].strip(), isbn=row[1].strip(), text=",".join(row[2:]).strip())

    @staticmethod
    def _parse_favorite(row: Row) -> Favorite:
        return Favorite(username=row[0].strip(), title=row[1].strip(), author=row[2].strip(), isbn=row[3].strip())

    @staticmethod
    def _parse_submission(row: Row) -> Submission:
        return Submission(
            username=row[0].strip(),
            title=row[1].strip(),
            author=row[2].strip(),
            isbn=row[3].strip(),
            submitted_at=parse_timestamp(_field(row, 4)),
        )

    def list_borrows(self, username: Optional[str] = None) -> List[BorrowRecord]:
        return self._load("borrowed_books", self._parse_borrow, username)

    def add_borrow(self, record: BorrowRecord) -> None:
        self._append("borrowed_books", [
            record.username, record.title, record.author, record.isbn,
            format_timestamp(record.borrowed_at),
        ])

    def remove_borrow(self, username: str, isbn: str) -> int:
        keys = set(isbn_candidates(isbn))
        rows = self._raw_rows("borrowed_books")
        kept = [
            record for record in rows
            if not (len(record.fields) >= 4 and _owner(record) == username
                    and record.fields[3].strip() in keys)
        ]
        removed = len(rows) - len(kept)
        if removed:
            self._rewrite("borrowed_books", kept)
        return removed

    def list_history(self, username: Optional[str] = None) -> List[HistoryEntry]:
        return self._load("reading_history", self._parse_history, username)

    def add_history(self, entry: HistoryEntry) -> None:
        self._append("reading_history", [
            entry.username, entry.title, entry.author, entry.isbn,
            format_timestamp(entry.timestamp),
        ])

    def list_ratings(self, username: Optional[str] = None) -> List[Rating]:
        return self._load("ratings", self._parse_rating, username)

    def add_rating(self, rating: Rating) -> None:
        self._append("ratings", [rating.username, rating.isbn, str(rating.rating)])

    def list_reviews(self, username: Optional[str] = None) -> List[Review]:
        return self._load("reviews", self._parse_review, username)

    def add_review(self, review: Review) -> None:
        self._append("reviews", [review.username, review.isbn, review.text])

    def list_favorites(self, username: Optional[str] = None) -> List[Favorite]:
        return self._load("favorites", self._parse_favorite, username)

    def add_favorite(self, favorite: Favorite) -> None:
        self._append("favorites", [favorite.username, favorite.title, favorite.author, favorite.isbn])

    def list_submissions(self) -> List[Submission]:
        return self._load("submissions", self._parse_submission)

    def add_submission(self, submission: Submission) -> None:
        self._append("submissions", [
            submission.username, submission.title, submission.author, submission.isbn,
            format_timestamp(submission.submitted_at),
        ])

    def remove_submission(self, isbn: str) -> Optional[Submission]:
        keys = set(isbn_candidates(isbn))
        rows = self._raw_rows("submissions")
        for index, record in enumerate(rows):
            if len(record.fields) >= 4 and record.fields[3].strip() in keys:
                submission = self._parse_submission(record.fields)
                self._rewrite("submissions", rows[:index] + rows[index + 1:])
                return submission
        return None

    def rename_user(self, old: str, new: str) -> List[str]:
        """Rewrite the owner of each of ``old``'s rows; other rows keep their text"""
        touched = []
        for name in LEDGER_LOGS:
            rows = self._raw_rows(name)
            updated = [
                [new] + record.fields[1:] if _owner(record) == old else record
                for record in rows
            ]
            if any(isinstance(row, list) for row in updated):
                self._rewrite(name, updated)
                touched.append(name)
        return touched

    def purge_user(self, username: str) -> List[str]:
        touched = []
        for name in LEDGER_LOGS:
            rows = self._raw_rows(name)
            kept = [record for record in rows if _owner(record) != username]
            if len(kept) != len(rows):
                self._rewrite(name, kept)
                touched.append(name)
        return touched


class CsvStorage(Storage):
    """Flat-file backend: every store shares one RecordStore"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.records = RecordStore(strict=settings.strict_csv)
        self.catalog = CsvCatalogStore(self.records, settings.books_file)
        self.readers = CsvAccountStore(self.records, settings.readers_file, "reader")
        self.librarians = CsvAccountStore(self.records, settings.librarians_file, "librarian")
        self.ledger = CsvLedgerStore(self.records, settings)

    def transaction(self):
        return self.records.transaction()

    @property
    def diagnostics(self):
        return self.records.diagnostics
