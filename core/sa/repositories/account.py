# core/sa/repositories/account.py
from typing import Optional
from sqlalchemy.orm import Session
from core.models.library import LibrarianAccount, ReaderAccount
from core.storage.base import AccountStore
from ..models import Librarian, Reader
from .base import BaseRepository, SessionScope

class AccountRepository(BaseRepository, AccountStore):
    """Repository for reader or librarian accounts.

    The same class serves both tables; ``kind`` picks the model.
    """

    def __init__(self, session: Session, kind: str, scope: Optional[SessionScope] = None):
        super().__init__(session, scope)
        self.kind = kind
        self.model = Reader if kind == "reader" else Librarian
        self.schema = ReaderAccount if kind == "reader" else LibrarianAccount

    def get_by_username(self, username: str):
        """Get an account row by its exact username.
        
        Args:
            username: Case-sensitive username
            
        Returns:
            The Reader/Librarian row if found, None otherwise
        """
        return self.session.query(self.model).filter(self.model.username == username).one_or_none()

    def list_accounts(self):
        rows = self.session.query(self.model).order_by(self.model.id).all()
        return [self.schema.model_validate(row) for row in rows]

    def add_account(self, account) -> None:
        self.session.add(self.model(**account.model_dump()))
        self._commit()

    def update_account(self, username: str, account) -> bool:
        row = self.get_by_username(username)
        if not row:
            return False
        for field, value in account.model_dump().items():
            setattr(row, field, value)
        self._commit()
        return True

    def delete_account(self, username: str) -> bool:
        row = self.get_by_username(username)
        if not row:
            return False
        self.session.delete(row)
        self._commit()
        return True
