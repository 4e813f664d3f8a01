# core/sa/models/base.py
from datetime import datetime, UTC
from sqlalchemy.orm import DeclarativeBase, mapped_column, Mapped
from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator

class Base(DeclarativeBase):
    """Base class for all models"""
    pass

class UtcDateTime(TypeDecorator):
    """DateTime that treats empty strings as None and always returns aware UTC values"""
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value == '':
            return None
        return value

    def process_result_value(self, value, dialect):
        if value == '' or value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

class TimestampMixin:
    """Mixin to add created_at and updated_at columns"""
    created_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False, default=lambda: datetime.now(UTC))
    updated_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))
