# core/storage/__init__.py
import logging

from core.config import Settings
from core.storage.base import AccountStore, CatalogStore, LedgerStore, Storage, LEDGER_LOGS
from core.storage.records import LoadDiagnostics, RawRecord, RecordStore

logger = logging.getLogger(__name__)


def create_storage(settings: Settings) -> Storage:
    """Build the storage backend named by ``settings.backend``"""
    if settings.backend == "sqlite":
        from core.sa.storage import SqlStorage
        logger.info("Using database backend at %s", settings.database_url)
        return SqlStorage(settings)

    from core.storage.csv_store import CsvStorage
    logger.info("Using flat-file backend in %s", settings.data_dir.resolve())
    return CsvStorage(settings)


__all__ = [
    'AccountStore',
    'CatalogStore',
    'LedgerStore',
    'Storage',
    'LEDGER_LOGS',
    'LoadDiagnostics',
    'RawRecord',
    'RecordStore',
    'create_storage',
]
