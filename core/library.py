# core/library.py
import logging
from typing import Optional

from core.config import Settings
from core.services.accounts import AccountDirectory
from core.services.catalog import Catalog
from core.services.ledger import LendingLedger
from core.services.reporting import Reporting
from core.storage import Storage, create_storage

logger = logging.getLogger(__name__)


class Library:
    """Wires one storage backend to the catalog, ledger, directories and reports"""

    def __init__(self, settings: Optional[Settings] = None, storage: Optional[Storage] = None):
        self.settings = settings or Settings.from_env()
        self.storage = storage or create_storage(self.settings)
        self.ledger = LendingLedger(self.storage, self.settings.loan_days)
        self.readers = AccountDirectory(self.storage, "reader", ledger=self.ledger)
        self.librarians = AccountDirectory(self.storage, "librarian")
        self.catalog = Catalog(self.storage, self.ledger, self.readers)
        self.reports = Reporting(self.catalog, self.ledger, self.readers)
        self.catalog.load()
        logger.info(
            "Library ready: %d books, %d readers, %d librarians",
            len(self.catalog.list_books(refresh=False)),
            len(self.readers.list_accounts()),
            len(self.librarians.list_accounts()),
        )

    def close(self) -> None:
        self.storage.close()
