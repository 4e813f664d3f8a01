# core/sa/models/__init__.py
from .base import Base, TimestampMixin, UtcDateTime
from .catalog import CatalogBook
from .account import Reader, Librarian
from .ledger import Loan, ReadingHistory, BookRating, BookReview, BookFavorite, BookSubmission

__all__ = [
    'Base',
    'TimestampMixin',
    'UtcDateTime',
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
