# core/sa/database.py
from typing import Optional
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import NullPool, QueuePool, StaticPool
import logging
import os

from core.sa.models import Base

logger = logging.getLogger(__name__)

class Database:
    def __init__(self, connection_string: Optional[str] = None, **engine_kwargs):
        """Initialize database connection
        
        Args:
            connection_string: Database connection string (e.g., "sqlite:///library.db")
                              If None, will use the DATABASE_URL environment variable or fall back to SQLite
            engine_kwargs: Additional keyword arguments to pass to create_engine
        """
        self.connection_string = connection_string or os.getenv("DATABASE_URL", "sqlite:///library.db")
        self.is_sqlite = self.connection_string.startswith("sqlite")
        self.is_memory = self.is_sqlite and self.connection_string in ("sqlite://", "sqlite:///:memory:")
        
        # SQLite-specific settings
        if self.is_sqlite:
            engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
            # An in-memory database lives as long as its single connection
            engine_kwargs.setdefault("poolclass", StaticPool if self.is_memory else NullPool)
            
        # PostgreSQL recommended settings
        else:
            engine_kwargs.setdefault("pool_size", 5)
            engine_kwargs.setdefault("max_overflow", 10)
            engine_kwargs.setdefault("poolclass", QueuePool)
            
        self.engine = create_engine(
            self.connection_string,
            **engine_kwargs
        )
        
        # Create sessionmaker
        self._SessionFactory = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine
        )

    def init_db(self) -> None:
        """Initialize database schema"""
        logger.info("Creating library tables on %s", self.engine.url.render_as_string(hide_password=True))
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        return self._SessionFactory()

    def dispose(self) -> None:
        self.engine.dispose()
