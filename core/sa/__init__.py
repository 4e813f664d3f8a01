# core/sa/__init__.py
from .database import Database
from .storage import SqlStorage
from .models import (
    Base, CatalogBook, Reader, Librarian, Loan, ReadingHistory,
    BookRating, BookReview, BookFavorite, BookSubmission
)

__all__ = [
    'Database',
    'SqlStorage',
    'Base',
    'CatalogBook',
    'Reader',
    'Librarian',
    'Loan',
    'ReadingHistory',
    'BookRating',
    'BookReview',
    'BookFavorite',
    'BookSubmission'
]
