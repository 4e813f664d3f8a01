# tests/test_isbn.py

import pytest

from core.errors import ValidationError
from core.isbn import isbn_candidates, normalize_isbn


def test_normalize_adds_prefix_to_legacy_isbn():
    """Test that a bare 5-digit ISBN gets the 978- prefix."""
    assert normalize_isbn("12345") == "978-12345"


def test_normalize_keeps_canonical_isbn():
    """Test that an already prefixed ISBN is unchanged apart from whitespace."""
    assert normalize_isbn("  978-0-441-17271-9 ") == "978-0-441-17271-9"


@pytest.mark.parametrize("value", ["", "   ", "abc", "978-12a45", "-"])
def test_normalize_rejects_malformed_isbn(value):
    """Test that blank or non-numeric ISBNs are rejected."""
    with pytest.raises(ValidationError):
        normalize_isbn(value)


def test_candidates_cover_raw_canonical_and_bare_forms():
    """Test that lookups match a book stored with or without the prefix."""
    assert isbn_candidates("12345") == ["12345", "978-12345"]
    assert isbn_candidates("978-12345") == ["978-12345", "12345"]


def test_candidates_for_malformed_input_is_raw_only():
    """Test that an unparseable ISBN is only matched as typed."""
    assert isbn_candidates("abc") == ["abc"]
