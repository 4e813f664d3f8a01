# tests/conftest.py
import sys
import pytest
from pathlib import Path

# Add project root to Python path
project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from core.config import Settings
from core.library import Library


@pytest.fixture
def settings(tmp_path):
    """Flat-file settings rooted in a fresh temporary directory"""
    return Settings(data_dir=tmp_path)


@pytest.fixture
def library(settings):
    """An empty library over the flat-file backend"""
    lib = Library(settings)
    yield lib
    lib.close()


@pytest.fixture
def stocked_library(library):
    """A library with three books, two readers and one librarian"""
    library.catalog.add("Dune", "Frank Herbert", "11111")
    library.catalog.add("Emma", "Jane Austen", "22222")
    library.catalog.add("Ulysses", "James Joyce", "33333")
    library.readers.register("alice", "p1")
    library.readers.register("bob", "p2")
    library.librarians.register("libby", "secret")
    return library
