# core/sa/storage.py
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError

from core.config import Settings
from core.errors import StorageError
from core.storage.base import Storage
from .database import Database
from .repositories import AccountRepository, CatalogRepository, LedgerRepository, SessionScope

logger = logging.getLogger(__name__)


class SqlStorage(Storage):
    """Embedded-database backend: all repositories share one session"""

    def __init__(self, settings: Settings, database: Optional[Database] = None):
        self.database = database or Database(settings.database_url)
        self.database.init_db()
        self.session = self.database.get_session()
        self.scope = SessionScope()
        self.catalog = CatalogRepository(self.session, self.scope)
        self.readers = AccountRepository(self.session, "reader", self.scope)
        self.librarians = AccountRepository(self.session, "librarian", self.scope)
        self.ledger = LedgerRepository(self.session, self.scope)

    @contextmanager
    def transaction(self) -> Iterator["SqlStorage"]:
        """Commit every repository write in the block at once, or roll all of them back"""
        self.scope.depth += 1
        try:
            yield self
        except BaseException:
            self.scope.depth -= 1
            if not self.scope.active:
                logger.info("Rolling back database transaction")
                self.session.rollback()
            raise
        self.scope.depth -= 1
        if self.scope.active:
            return
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            logger.error("Database commit failed: %s", e)
            self.session.rollback()
            raise StorageError(f"Database commit failed: {e}") from e

    def reload(self) -> None:
        self.session.expire_all()

    def close(self) -> None:
        self.session.close()
        self.database.dispose()
