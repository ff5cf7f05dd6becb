"""Abstract storage and repository interfaces."""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from gigbook.domain.entities import (
    Event,
    EventStatus,
    Settings,
    Transaction,
    TransactionType,
)


class KeyValueStore(ABC):
    """String key-value store holding one serialized blob per collection."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Get the value stored under key, or None."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove key if present."""
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List all stored keys."""
        pass

    def close(self) -> None:
        """Release underlying resources."""
        pass


class EventRepository(ABC):
    """Persistence contract for events."""

    @abstractmethod
    def save(self, event: Event) -> Event:
        """Insert or replace an event. Returns the saved event."""
        pass

    @abstractmethod
    def find_by_id(self, event_id: str) -> Optional[Event]:
        """Get event by ID."""
        pass

    @abstractmethod
    def find_all(
        self,
        status: Optional[EventStatus] = None,
        order_by: str = "date",
        descending: bool = True,
    ) -> list[Event]:
        """List events, optionally filtered by status.

        Args:
            status: Optional status filter
            order_by: 'date', 'name' or 'created_at'
            descending: Sort direction
        """
        pass

    @abstractmethod
    def delete(self, event_id: str) -> None:
        """Delete an event."""
        pass

    @abstractmethod
    def delete_all(self) -> None:
        """Delete every event without reading the stored records."""
        pass

    def exists(self, event_id: str) -> bool:
        """Check if an event exists."""
        return self.find_by_id(event_id) is not None


class TransactionRepository(ABC):
    """Persistence contract for transactions."""

    @abstractmethod
    def save(self, transaction: Transaction) -> Transaction:
        """Insert or replace a transaction. Returns the saved transaction."""
        pass

    @abstractmethod
    def find_by_id(self, transaction_id: str) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def find_all(
        self,
        event_id: Optional[str] = None,
        type: Optional[TransactionType] = None,
    ) -> list[Transaction]:
        """List transactions with optional event and type filters."""
        pass

    @abstractmethod
    def delete(self, transaction_id: str) -> None:
        """Delete a transaction."""
        pass

    @abstractmethod
    def delete_by_event_id(self, event_id: str) -> None:
        """Delete all transactions of an event."""
        pass

    @abstractmethod
    def delete_all(self) -> None:
        """Delete every transaction without reading the stored records."""
        pass

    def find_by_event_id(self, event_id: str) -> list[Transaction]:
        """List transactions of an event."""
        return self.find_all(event_id=event_id)

    def calculate_total_expenses(self, event_id: str) -> Decimal:
        """Sum of EXPENSE amounts of an event."""
        return sum(
            (t.amount for t in self.find_all(event_id=event_id, type=TransactionType.EXPENSE)),
            Decimal("0"),
        )

    def calculate_total_income(self, event_id: str) -> Decimal:
        """Sum of INCOME amounts of an event."""
        return sum(
            (t.amount for t in self.find_all(event_id=event_id, type=TransactionType.INCOME)),
            Decimal("0"),
        )

    def count_expenses_with_receipt(self, event_id: str) -> int:
        expenses = self.find_all(event_id=event_id, type=TransactionType.EXPENSE)
        return sum(1 for t in expenses if t.has_receipt)

    def count_expenses_without_receipt(self, event_id: str) -> int:
        expenses = self.find_all(event_id=event_id, type=TransactionType.EXPENSE)
        return sum(1 for t in expenses if not t.has_receipt)


class SettingsRepository(ABC):
    """Persistence contract for the settings singleton."""

    @abstractmethod
    def find(self) -> Optional[Settings]:
        """Get stored settings, or None if never saved."""
        pass

    @abstractmethod
    def save(self, settings: Settings) -> Settings:
        """Store settings. Returns the saved settings."""
        pass

    def exists(self) -> bool:
        return self.find() is not None
