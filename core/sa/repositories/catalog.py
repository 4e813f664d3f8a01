# core/sa/repositories/catalog.py
from typing import List, Optional
from core.models.library import Book
from core.storage.base import CatalogStore
from ..models import CatalogBook
from .base import BaseRepository

class CatalogRepository(BaseRepository, CatalogStore):
    """Repository for managing catalog books."""

    def get_by_isbn(self, isbn: str) -> Optional[CatalogBook]:
        """Get the first catalog row with an exact ISBN.
        
        Args:
            isbn: The ISBN to search for
            
        Returns:
            The CatalogBook row if found, None otherwise
        """
        return (
            self.session.query(CatalogBook)
            .filter(CatalogBook.isbn == isbn)
            .order_by(CatalogBook.id)
            .first()
        )

    def list_books(self) -> List[Book]:
        rows = self.session.query(CatalogBook).order_by(CatalogBook.id).all()
        return [Book.model_validate(row) for row in rows]

    def add_book(self, book: Book) -> None:
        self.session.add(CatalogBook(**book.model_dump()))
        self._commit()

    def remove_book(self, isbn: str) -> bool:
        row = self.get_by_isbn(isbn)
        if not row:
            return False
        self.session.delete(row)
        self._commit()
        return True

    def update_book(self, isbn: str, book: Book) -> bool:
        row = self.get_by_isbn(isbn)
        if not row:
            return False
        for field, value in book.model_dump().items():
            setattr(row, field, value)
        self._commit()
        return True

    def save_loan_state(self, books: List[Book]) -> None:
        by_isbn = {book.isbn: book for book in books}
        for row in self.session.query(CatalogBook).all():
            state = by_isbn.get(row.isbn)
            if state is None:
                continue
            row.available = state.available
            row.borrowed_by = state.borrowed_by
            row.due_date = state.due_date
        self._commit()
