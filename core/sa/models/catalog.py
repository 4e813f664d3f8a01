# core/sa/models/catalog.py
from datetime import datetime
from sqlalchemy import Integer, String, Boolean, Index
from sqlalchemy.orm import Mapped, mapped_column
from .base import Base, TimestampMixin, UtcDateTime

class CatalogBook(Base, TimestampMixin):
    __tablename__ = 'book'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    isbn: Mapped[str] = mapped_column(String(32), nullable=False)

    # Denormalized loan state, written back from the lending ledger
    available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    borrowed_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    due_date: Mapped[datetime | None] = mapped_column(UtcDateTime, nullable=True)

    __table_args__ = (
        Index('idx_book_isbn', 'isbn'),
    )
