# core/sa/repositories/__init__.py
from .base import BaseRepository, SessionScope
from .catalog import CatalogRepository
from .account import AccountRepository
from .ledger import LedgerRepository

__all__ = ['BaseRepository', 'SessionScope', 'CatalogRepository', 'AccountRepository', 'LedgerRepository']
