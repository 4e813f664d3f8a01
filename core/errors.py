# core/errors.py
from typing import List, Optional


class LibraryError(Exception):
    """Base class for every error the library services raise"""
    pass


class ValidationError(LibraryError):
    """Input was blank, malformed or out of range"""
    pass


class NotFoundError(LibraryError):
    pass


class BookNotFoundError(NotFoundError):
    def __init__(self, isbn: str):
        self.isbn = isbn
        super().__init__(f"No book with ISBN '{isbn}' in the catalog")


class AccountNotFoundError(NotFoundError):
    def __init__(self, username: str):
        self.username = username
        super().__init__(f"No account named '{username}'")


class NoSuchBorrowRecordError(NotFoundError):
    def __init__(self, username: str, isbn: str):
        self.username = username
        self.isbn = isbn
        super().__init__(f"'{username}' has not borrowed a book with ISBN '{isbn}'")


class SubmissionNotFoundError(NotFoundError):
    def __init__(self, isbn: str):
        self.isbn = isbn
        super().__init__(f"No pending submission with ISBN '{isbn}'")


class ConflictError(LibraryError):
    pass


class AlreadyExistsError(ConflictError):
    def __init__(self, key: str, kind: str = "Username"):
        self.key = key
        self.kind = kind
        super().__init__(f"{kind} '{key}' already exists")


class PreconditionError(LibraryError):
    pass


class NotAvailableError(PreconditionError):
    def __init__(self, isbn: str, title: Optional[str] = None):
        self.isbn = isbn
        super().__init__(f"'{title or isbn}' is currently not available")


class NotBorrowedBySelfError(PreconditionError):
    def __init__(self, username: str, isbn: str):
        self.username = username
        self.isbn = isbn
        super().__init__(f"You haven't borrowed a book with ISBN {isbn}")


class StorageError(LibraryError):
    """Reading or writing the backing store failed"""
    pass


class MalformedRecordError(StorageError):
    def __init__(self, path: str, line_number: int, reason: str):
        self.path = path
        self.line_number = line_number
        super().__init__(f"{path}:{line_number}: {reason}")


class CascadeError(StorageError):
    """A multi-file commit failed after some files were already replaced"""

    def __init__(self, committed: List[str], pending: List[str], cause: Exception):
        self.committed = committed
        self.pending = pending
        self.cause = cause
        super().__init__(
            f"Commit interrupted: updated {committed or 'nothing'}, "
            f"not updated {pending}: {cause}"
        )
