# core/sa/repositories/ledger.py
from typing import List, Optional
from core.isbn import isbn_candidates
from core.models.library import (
    BorrowRecord, Favorite, HistoryEntry, Rating, Review, Submission
)
from core.storage.base import LedgerStore
from ..models import Loan, ReadingHistory, BookRating, BookReview, BookFavorite, BookSubmission
from .base import BaseRepository

# Ledger log name -> table, in cascade order
LEDGER_TABLES = {
    "borrowed_books": Loan,
    "reading_history": ReadingHistory,
    "ratings": BookRating,
    "favorites": BookFavorite,
    "reviews": BookReview,
    "submissions": BookSubmission,
}

class LedgerRepository(BaseRepository, LedgerStore):
    """Repository for the per-user lending logs."""

    def _list(self, model, schema, username: Optional[str] = None) -> list:
        query = self.session.query(model)
        if username is not None:
            query = query.filter(model.username == username)
        return [schema.model_validate(row) for row in query.order_by(model.id).all()]

    def _add(self, model, entry) -> None:
        self.session.add(model(**entry.model_dump()))
        self._commit()

    def list_borrows(self, username: Optional[str] = None) -> List[BorrowRecord]:
        return self._list(Loan, BorrowRecord, username)

    def add_borrow(self, record: BorrowRecord) -> None:
        self._add(Loan, record)

    def remove_borrow(self, username: str, isbn: str) -> int:
        removed = (
            self.session.query(Loan)
            .filter(Loan.username == username, Loan.isbn.in_(isbn_candidates(isbn)))
            .delete()
        )
        self._commit()
        return removed

    def list_history(self, username: Optional[str] = None) -> List[HistoryEntry]:
        return self._list(ReadingHistory, HistoryEntry, username)

    def add_history(self, entry: HistoryEntry) -> None:
        self._add(ReadingHistory, entry)

    def list_ratings(self, username: Optional[str] = None) -> List[Rating]:
        return self._list(BookRating, Rating, username)

    def add_rating(self, rating: Rating) -> None:
        self._add(BookRating, rating)

    def list_reviews(self, username: Optional[str] = None) -> List[Review]:
        return self._list(BookReview, Review, username)

    def add_review(self, review: Review) -> None:
        self._add(BookReview, review)

    def list_favorites(self, username: Optional[str] = None) -> List[Favorite]:
        return self._list(BookFavorite, Favorite, username)

    def add_favorite(self, favorite: Favorite) -> None:
        self._add(BookFavorite, favorite)

    def list_submissions(self) -> List[Submission]:
        return self._list(BookSubmission, Submission)

    def add_submission(self, submission: Submission) -> None:
        self._add(BookSubmission, submission)

    def remove_submission(self, isbn: str) -> Optional[Submission]:
        row = (
            self.session.query(BookSubmission)
            .filter(BookSubmission.isbn.in_(isbn_candidates(isbn)))
            .order_by(BookSubmission.id)
            .first()
        )
        if not row:
            return None
        submission = Submission.model_validate(row)
        self.session.delete(row)
        self._commit()
        return submission

    def rename_user(self, old: str, new: str) -> List[str]:
        touched = []
        for name, model in LEDGER_TABLES.items():
            updated = (
                self.session.query(model)
                .filter(model.username == old)
                .update({model.username: new})
            )
            if updated:
                touched.append(name)
        self._commit()
        return touched

    def purge_user(self, username: str) -> List[str]:
        touched = []
        for name, model in LEDGER_TABLES.items():
            deleted = (
                self.session.query(model)
                .filter(model.username == username)
                .delete()
            )
            if deleted:
                touched.append(name)
        self._commit()
        return touched
