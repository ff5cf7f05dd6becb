"""Generic SQLAlchemy key-value store implementation."""

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gigbook.database.base import KeyValueStore
from gigbook.database.models import KeyValueEntry, create_session_factory
from gigbook.domain.errors import StorageError


class SQLAlchemyKeyValueStore(KeyValueStore):
    """SQLAlchemy-based implementation of KeyValueStore."""

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy key-value store.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db',
                'sqlite://' for an in-memory database)
        """
        self.database_url = database_url
        self.session_factory = create_session_factory(database_url)
        self._session: Optional[Session] = None

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def close(self) -> None:
        """Close the current session."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def get_item(self, key: str) -> Optional[str]:
        """Get the value stored under key, or None."""
        session = self._get_session()
        entry = session.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
        if entry is None:
            return None
        return entry.value

    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        session = self._get_session()
        try:
            entry = session.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
            if entry is None:
                session.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Could not write '{key}': {e}") from e

    def remove_item(self, key: str) -> None:
        """Remove key if present."""
        session = self._get_session()
        try:
            entry = session.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
            if entry is not None:
                session.delete(entry)
                session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Could not remove '{key}': {e}") from e

    def keys(self) -> list[str]:
        """List all stored keys."""
        session = self._get_session()
        return [row.key for row in session.query(KeyValueEntry.key).order_by(KeyValueEntry.key).all()]
