# core/services/accounts.py

import logging
from typing import List, Optional

from core.errors import (
    AccountNotFoundError, AlreadyExistsError, StorageError, ValidationError
)
from core.models.library import Account, LibrarianAccount, ReaderAccount
from core.services.ledger import LendingLedger
from core.storage.base import Storage

logger = logging.getLogger(__name__)

DELETE_CONFIRMATION = "DELETE"


class AccountDirectory:
    """Readers or librarians, authenticated against an in-memory snapshot.

    The snapshot is loaded once at construction and kept current by every
    mutation made through the directory, so a signup is visible to later
    logins in the same run. Credentials are plain text and case-sensitive.
    """

    def __init__(self, storage: Storage, kind: str, ledger: Optional[LendingLedger] = None):
        if kind not in ("reader", "librarian"):
            raise ValueError(f"Unknown account kind '{kind}'")
        self.storage = storage
        self.kind = kind
        self.store = storage.readers if kind == "reader" else storage.librarians
        self.ledger = ledger
        self._accounts: List[Account] = []
        self.reload()

    def reload(self) -> None:
        self._accounts = list(self.store.list_accounts())

    def list_accounts(self) -> List[Account]:
        return list(self._accounts)

    def get(self, username: str) -> Optional[Account]:
        return next((a for a in self._accounts if a.username == username), None)

    def _require(self, username: str) -> Account:
        account = self.get(username)
        if account is None:
            raise AccountNotFoundError(username)
        return account

    def _replace(self, username: str, account: Optional[Account]) -> None:
        for index, existing in enumerate(self._accounts):
            if existing.username == username:
                if account is None:
                    del self._accounts[index]
                else:
                    self._accounts[index] = account
                return

    def authenticate(self, username: str, password: str) -> Optional[Account]:
        return next(
            (a for a in self._accounts if a.username == username and a.password == password),
            None,
        )

    def register(self, username: str, password: str) -> Account:
        """Create an account.

        Raises:
            ValidationError: If the username or password is blank.
            AlreadyExistsError: If the username is taken (case-sensitive).
        """
        username = (username or "").strip()
        if not username:
            raise ValidationError("Username cannot be empty")
        if not password:
            raise ValidationError("Password cannot be empty")
        if self.get(username) is not None:
            raise AlreadyExistsError(username)

        if self.kind == "reader":
            account = ReaderAccount(username=username, password=password, books_read=0)
        else:
            account = LibrarianAccount(username=username, password=password)
        self.store.add_account(account)
        self._accounts.append(account)
        logger.info("Registered %s %s", self.kind, username)
        return account

    def change_username(self, old: str, new: str) -> Account:
        """Rename an account and, for readers, every ledger row it owns"""
        account = self._require(old)
        new = (new or "").strip()
        if not new:
            raise ValidationError("Username cannot be empty")
        if new == old:
            return account
        if self.get(new) is not None:
            raise AlreadyExistsError(new)

        renamed = account.model_copy(update={"username": new})
        try:
            with self.storage.transaction():
                self.store.update_account(old, renamed)
                if self.ledger is not None:
                    self.ledger.rename_user(old, new)
        except StorageError:
            self.reload()
            raise
        self._replace(old, renamed)
        logger.info("Renamed %s %s to %s", self.kind, old, new)
        return renamed

    def change_password(self, username: str, old_password: str, new_password: str,
                        confirm_password: str) -> Account:
        account = self._require(username)
        if account.password != old_password:
            raise ValidationError("Incorrect current password")
        if not new_password:
            raise ValidationError("Password cannot be empty")
        if new_password != confirm_password:
            raise ValidationError("Passwords do not match")

        updated = account.model_copy(update={"password": new_password})
        self.store.update_account(username, updated)
        self._replace(username, updated)
        return updated

    def delete(self, username: str, confirmation: str) -> Account:
        """Hard-delete an account and, for readers, all of its ledger rows.

        Raises:
            ValidationError: Unless ``confirmation`` is the DELETE token.
        """
        account = self._require(username)
        if (confirmation or "").strip().upper() != DELETE_CONFIRMATION:
            raise ValidationError("Account deletion was not confirmed")

        try:
            with self.storage.transaction():
                self.store.delete_account(username)
                if self.ledger is not None:
                    self.ledger.purge_user(username)
        except StorageError:
            self.reload()
            raise
        self._replace(username, None)
        logger.info("Deleted %s %s", self.kind, username)
        return account

    def increment_books_read(self, username: str) -> ReaderAccount:
        if self.kind != "reader":
            raise ValueError("Only readers keep a books-read count")
        account = self._require(username)
        updated = account.model_copy(update={"books_read": account.books_read + 1})
        if not self.store.update_account(username, updated):
            raise AccountNotFoundError(username)
        self._replace(username, updated)
        return updated
