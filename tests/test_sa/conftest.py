# tests/test_sa/conftest.py
import sys
import pytest
from pathlib import Path

# Add project root to Python path
project_root = str(Path(__file__).parent.parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from core.config import Settings
from core.library import Library
from core.sa.database import Database
from core.sa.storage import SqlStorage


@pytest.fixture
def sql_settings(tmp_path):
    """Settings for the database backend on a file in a temporary directory"""
    return Settings(
        data_dir=tmp_path,
        backend="sqlite",
        database_url=f"sqlite:///{tmp_path / 'library.db'}",
    )


@pytest.fixture
def database():
    """An in-memory database with the library schema"""
    db = Database("sqlite://")
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    """Create a new database session for a test"""
    session = database.get_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sql_library(sql_settings):
    """A library over the database backend with three books and two readers"""
    library = Library(sql_settings)
    library.catalog.add("Dune", "Frank Herbert", "11111")
    library.catalog.add("Emma", "Jane Austen", "22222")
    library.catalog.add("Ulysses", "James Joyce", "33333")
    library.readers.register("alice", "p1")
    library.readers.register("bob", "p2")
    yield library
    library.close()


@pytest.fixture
def sql_storage(sql_settings):
    storage = SqlStorage(sql_settings)
    yield storage
    storage.close()
