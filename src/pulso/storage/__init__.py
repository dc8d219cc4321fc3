"""Storage layer: SQLite database, persistence services and their contract."""

from pulso.storage.base import PersistenceService
from pulso.storage.database import Database, init_database
from pulso.storage.memory import MemoryPersistence
from pulso.storage.sqlite import SqlitePersistence

__all__ = [
    "Database",
    "init_database",
    "MemoryPersistence",
    "PersistenceService",
    "SqlitePersistence",
]
