# core/models/library.py

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional, Union


class Book(BaseModel):
    """A catalog entry. Loan fields are derived from the lending ledger."""
    model_config = ConfigDict(from_attributes=True)

    title: str
    author: str
    isbn: str
    available: bool = True
    borrowed_by: Optional[str] = None
    due_date: Optional[datetime] = None


class ReaderAccount(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    username: str
    password: str
    books_read: int = Field(default=0, ge=0)


class LibrarianAccount(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    username: str
    password: str


Account = Union[ReaderAccount, LibrarianAccount]


class BorrowRecord(BaseModel):
    """An active loan: one row of borrowed_books"""
    model_config = ConfigDict(from_attributes=True)

    username: str
    title: str
    author: str
    isbn: str
    borrowed_at: Optional[datetime] = None


class HistoryEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    username: str
    title: str
    author: str
    isbn: str
    timestamp: Optional[datetime] = None


class Rating(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    username: str
    isbn: str
    rating: int = Field(ge=1, le=5)


class Review(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    username: str
    isbn: str
    text: str


class Favorite(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    username: str
    title: str
    author: str
    isbn: str


class Submission(BaseModel):
    """A book a reader proposed for the catalog, waiting for a librarian"""
    model_config = ConfigDict(from_attributes=True)

    username: str
    title: str
    author: str
    isbn: str
    submitted_at: Optional[datetime] = None


class BorrowReceipt(BaseModel):
    book: Book
    borrowed_at: datetime
    due_at: datetime


class OverdueLoan(BaseModel):
    record: BorrowRecord
    due_at: datetime


class LibraryReport(BaseModel):
    """Aggregate figures shown on the librarian report screen"""
    total_books: int
    available_books: int
    borrowed_books: int
    overdue_books: int
    total_readers: int
    total_ratings: int
    total_reviews: int
    most_active_reader: Optional[ReaderAccount] = None
    most_borrowed_isbn: Optional[str] = None
    most_borrowed_title: Optional[str] = None
    most_borrowed_count: int = 0
