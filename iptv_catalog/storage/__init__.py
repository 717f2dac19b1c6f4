"""
Storage Layer.

This package handles all data persistence: the shared catalog database and its
schema, the replace-all catalog writer, the read-side queries, the stored
account and the INI configuration file.
"""

from .account_store import AccountStore
from .config_manager import ConfigManager
from .database import CatalogDatabase, apply_migrations
from .persister import CatalogPersister, PersistResult
from .reader import CatalogReader

__all__ = [
    "AccountStore",
    "CatalogDatabase",
    "CatalogPersister",
    "CatalogReader",
    "ConfigManager",
    "PersistResult",
    "apply_migrations",
]
