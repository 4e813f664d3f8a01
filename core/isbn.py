# core/isbn.py
import re
from typing import List

from core.errors import ValidationError

ISBN_PREFIX = "978-"

_BODY_PATTERN = re.compile(r"^[0-9][0-9-]*$")


def normalize_isbn(value: str) -> str:
    """Return the canonical ``978-`` prefixed form of an ISBN.

    Legacy catalog entries use a bare 5-digit number; those and any other
    digits-and-hyphens body get the prefix added.

    Raises:
        ValidationError: If the value is blank or contains anything other
            than digits and hyphens after the prefix.
    """
    isbn = (value or "").strip()
    if not isbn:
        raise ValidationError("ISBN is required")
    body = isbn[len(ISBN_PREFIX):] if isbn.startswith(ISBN_PREFIX) else isbn
    if not _BODY_PATTERN.match(body):
        raise ValidationError(f"Invalid ISBN '{isbn}': use digits and hyphens only")
    return ISBN_PREFIX + body


def isbn_candidates(value: str) -> List[str]:
    """Keys a lookup should match.

    That is the raw input plus its canonical and bare forms, so legacy rows
    stored without the prefix are still found.
    """
    raw = (value or "").strip()
    candidates = [raw]
    try:
        canonical = normalize_isbn(raw)
    except ValidationError:
        return candidates
    for key in (canonical, canonical[len(ISBN_PREFIX):]):
        if key not in candidates:
            candidates.append(key)
    return candidates
