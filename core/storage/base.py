# core/storage/base.py
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import List, Optional

from core.models.library import (
    Account, Book, BorrowRecord, Favorite, HistoryEntry, Rating, Review, Submission
)

# Ledger logs keyed by username, in cascade order
LEDGER_LOGS = (
    "borrowed_books",
    "reading_history",
    "ratings",
    "favorites",
    "reviews",
    "submissions",
)


class CatalogStore(ABC):
    """Persistence for Book entities"""

    @abstractmethod
    def list_books(self) -> List[Book]:
        pass

    @abstractmethod
    def add_book(self, book: Book) -> None:
        pass

    @abstractmethod
    def remove_book(self, isbn: str) -> bool:
        """Remove the first book with this exact ISBN; False if there was none"""
        pass

    @abstractmethod
    def update_book(self, isbn: str, book: Book) -> bool:
        """Replace the first book with this exact ISBN; False if there was none"""
        pass

    @abstractmethod
    def save_loan_state(self, books: List[Book]) -> None:
        """Persist the availability columns of the given books"""
        pass


class AccountStore(ABC):
    """Persistence for one kind of account (readers or librarians)"""

    @abstractmethod
    def list_accounts(self) -> List[Account]:
        pass

    @abstractmethod
    def add_account(self, account: Account) -> None:
        pass

    @abstractmethod
    def update_account(self, username: str, account: Account) -> bool:
        """Replace the row owned by ``username``; False if there was none"""
        pass

    @abstractmethod
    def delete_account(self, username: str) -> bool:
        pass


class LedgerStore(ABC):
    """Persistence for the per-user lending logs"""

    @abstractmethod
    def list_borrows(self, username: Optional[str] = None) -> List[BorrowRecord]:
        pass

    @abstractmethod
    def add_borrow(self, record: BorrowRecord) -> None:
        pass

    @abstractmethod
    def remove_borrow(self, username: str, isbn: str) -> int:
        """Remove the borrow rows for (username, isbn); returns how many went"""
        pass

    @abstractmethod
    def list_history(self, username: Optional[str] = None) -> List[HistoryEntry]:
        pass

    @abstractmethod
    def add_history(self, entry: HistoryEntry) -> None:
        pass

    @abstractmethod
    def list_ratings(self, username: Optional[str] = None) -> List[Rating]:
        pass

    @abstractmethod
    def add_rating(self, rating: Rating) -> None:
        pass

    @abstractmethod
    def list_reviews(self, username: Optional[str] = None) -> List[Review]:
        pass

    @abstractmethod
    def add_review(self, review: Review) -> None:
        pass

    @abstractmethod
    def list_favorites(self, username: Optional[str] = None) -> List[Favorite]:
        pass

    @abstractmethod
    def add_favorite(self, favorite: Favorite) -> None:
        pass

    @abstractmethod
    def list_submissions(self) -> List[Submission]:
        pass

    @abstractmethod
    def add_submission(self, submission: Submission) -> None:
        pass

    @abstractmethod
    def remove_submission(self, isbn: str) -> Optional[Submission]:
        pass

    @abstractmethod
    def rename_user(self, old: str, new: str) -> List[str]:
        """Rewrite every ledger row owned by ``old``; returns the logs touched"""
        pass

    @abstractmethod
    def purge_user(self, username: str) -> List[str]:
        """Delete every ledger row owned by ``username``; returns the logs touched"""
        pass


class Storage(ABC):
    """Bundle of the stores one library instance works against"""
    catalog: CatalogStore
    readers: AccountStore
    librarians: AccountStore
    ledger: LedgerStore

    @abstractmethod
    def transaction(self) -> AbstractContextManager:
        """Group several store writes so they are applied all together or not at all"""
        pass

    def reload(self) -> None:
        """Drop any cached state so the next read sees external changes"""
        pass

    def close(self) -> None:
        pass
