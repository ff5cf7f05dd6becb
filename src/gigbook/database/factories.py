"""Storage factory functions."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from gigbook.database.base import (
    EventRepository,
    KeyValueStore,
    SettingsRepository,
    TransactionRepository,
)
from gigbook.database.memory import InMemoryKeyValueStore
from gigbook.database.repositories import (
    KeyValueEventRepository,
    KeyValueSettingsRepository,
    KeyValueTransactionRepository,
)
from gigbook.database.sqlalchemy_db import SQLAlchemyKeyValueStore


@dataclass
class Storage:
    """A key-value store and the repositories built on it."""

    store: KeyValueStore
    events: EventRepository
    transactions: TransactionRepository
    settings: SettingsRepository

    def close(self) -> None:
        self.store.close()


def create_storage(store: KeyValueStore) -> Storage:
    """Wire the three repositories onto a store."""
    return Storage(
        store=store,
        events=KeyValueEventRepository(store),
        transactions=KeyValueTransactionRepository(store),
        settings=KeyValueSettingsRepository(store),
    )


def create_memory_storage() -> Storage:
    """Create storage that lives only in this process."""
    return create_storage(InMemoryKeyValueStore())


def create_sqlite_storage(database_path: Optional[str] = None) -> Storage:
    """Create SQLite-backed storage.

    Args:
        database_path: Path to SQLite database file. If None, checks GIGBOOK_DB_PATH
            environment variable, then defaults to ~/.gigbook/gigbook.db

    Returns:
        Storage whose repositories persist through SQLAlchemy
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("GIGBOOK_DB_PATH")

    if database_path is None:
        # Default to ~/.gigbook/gigbook.db
        home = Path.home()
        db_dir = home / ".gigbook"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "gigbook.db")

    database_url = f"sqlite:///{database_path}"
    return create_storage(SQLAlchemyKeyValueStore(database_url))
