# core/sa/repositories/base.py
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from core.errors import StorageError

class SessionScope:
    """Tracks whether repositories are running inside a storage transaction"""

    def __init__(self):
        self.depth = 0

    @property
    def active(self) -> bool:
        return self.depth > 0

class BaseRepository:
    def __init__(self, session: Session, scope: Optional[SessionScope] = None):
        """Initialize the repository with a database session.
        
        Args:
            session: SQLAlchemy session for database operations
            scope: Shared transaction scope; while it is active writes are
                flushed but left for the scope owner to commit
        """
        self.session = session
        self.scope = scope

    def _commit(self) -> None:
        try:
            self.session.flush()
            if self.scope is None or not self.scope.active:
                self.session.commit()
        except SQLAlchemyError as e:
            if self.scope is None or not self.scope.active:
                self.session.rollback()
            raise StorageError(f"Database write failed: {e}") from e
