"""Database layer for gigbook application."""

from gigbook.database.base import (
    EventRepository,
    KeyValueStore,
    SettingsRepository,
    TransactionRepository,
)
from gigbook.database.factories import (
    Storage,
    create_memory_storage,
    create_sqlite_storage,
    create_storage,
)

__all__ = [
    "EventRepository",
    "KeyValueStore",
    "SettingsRepository",
    "TransactionRepository",
    "Storage",
    "create_memory_storage",
    "create_sqlite_storage",
    "create_storage",
]
