"""Repositories persisting each collection as one JSON blob in a KeyValueStore."""

import json
import logging
import time
from typing import Any, Optional

from gigbook.database.base import (
    EventRepository,
    KeyValueStore,
    SettingsRepository,
    TransactionRepository,
)
from gigbook.database.mappers import (
    event_from_record,
    settings_from_record,
    transaction_from_record,
)
from gigbook.domain.entities import Event, EventStatus, Settings, Transaction, TransactionType
from gigbook.domain.errors import StorageError

logger = logging.getLogger(__name__)

EVENTS_KEY = "gigbook_events"
TRANSACTIONS_KEY = "gigbook_transactions"
SETTINGS_KEY = "gigbook_settings"


class JsonBlob:
    """A JSON document stored under one key.

    Unparseable content is moved aside under a timestamped backup key and
    reads continue as if the key were empty.
    """

    def __init__(self, store: KeyValueStore, key: str):
        self.store = store
        self.key = key

    def read(self, container: type) -> Optional[Any]:
        """Read and parse the blob.

        Args:
            container: Expected top-level JSON type (list or dict)

        Returns:
            Parsed data, or None if absent or quarantined
        """
        raw = self.store.get_item(self.key)
        if raw is None or not raw.strip():
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            self.quarantine(raw, str(e))
            return None
        if not isinstance(data, container):
            self.quarantine(raw, f"expected a JSON {container.__name__}")
            return None
        return data

    def write(self, data: Any) -> None:
        try:
            payload = json.dumps(data, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Could not serialize '{self.key}': {e}") from e
        self.store.set_item(self.key, payload)

    def quarantine(self, raw: str, reason: str) -> str:
        """Move corrupted content to a backup key. Returns the backup key."""
        backup_key = f"{self.key}_corrupted_bkp_{int(time.time() * 1000)}"
        self.store.set_item(backup_key, raw)
        self.store.remove_item(self.key)
        logger.warning(
            "Corrupted data under '%s' (%s); moved to '%s' and continuing with empty data",
            self.key,
            reason,
            backup_key,
        )
        return backup_key


class KeyValueEventRepository(EventRepository):
    """Event repository backed by a JSON array of event records."""

    def __init__(self, store: KeyValueStore, key: str = EVENTS_KEY):
        self.blob = JsonBlob(store, key)

    def _records(self) -> list[dict[str, Any]]:
        return self.blob.read(list) or []

    def save(self, event: Event) -> Event:
        records = self._records()
        record = event.to_record()
        for index, existing in enumerate(records):
            if existing.get("id") == event.id:
                records[index] = record
                break
        else:
            records.append(record)
        self.blob.write(records)
        logger.debug("Saved event %s", event.id)
        return event

    def find_by_id(self, event_id: str) -> Optional[Event]:
        for record in self._records():
            if record.get("id") == event_id:
                return event_from_record(record)
        return None

    def find_all(
        self,
        status: Optional[EventStatus] = None,
        order_by: str = "date",
        descending: bool = True,
    ) -> list[Event]:
        records = self._records()
        if status is not None:
            records = [r for r in records if r.get("status") == status]
        events = [event_from_record(r) for r in records]

        sort_keys = {
            "date": lambda e: (e.date, e.created_at),
            "name": lambda e: e.name.lower(),
            "created_at": lambda e: e.created_at,
        }
        if order_by not in sort_keys:
            raise ValueError(f"Cannot order events by '{order_by}'")
        return sorted(events, key=sort_keys[order_by], reverse=descending)

    def delete(self, event_id: str) -> None:
        records = self._records()
        self.blob.write([r for r in records if r.get("id") != event_id])
        logger.debug("Deleted event %s", event_id)

    def delete_all(self) -> None:
        self.blob.write([])
        logger.debug("Deleted all events")


class KeyValueTransactionRepository(TransactionRepository):
    """Transaction repository backed by a JSON array of transaction records."""

    def __init__(self, store: KeyValueStore, key: str = TRANSACTIONS_KEY):
        self.blob = JsonBlob(store, key)

    def _records(self) -> list[dict[str, Any]]:
        return self.blob.read(list) or []

    def save(self, transaction: Transaction) -> Transaction:
        records = self._records()
        record = transaction.to_record()
        for index, existing in enumerate(records):
            if existing.get("id") == transaction.id:
                records[index] = record
                break
        else:
            records.append(record)
        self.blob.write(records)
        logger.debug("Saved transaction %s for event %s", transaction.id, transaction.event_id)
        return transaction

    def find_by_id(self, transaction_id: str) -> Optional[Transaction]:
        for record in self._records():
            if record.get("id") == transaction_id:
                return transaction_from_record(record)
        return None

    def find_all(
        self,
        event_id: Optional[str] = None,
        type: Optional[TransactionType] = None,
    ) -> list[Transaction]:
        records = self._records()
        if event_id is not None:
            records = [r for r in records if r.get("eventId") == event_id]
        if type is not None:
            records = [r for r in records if r.get("type") == type]
        return [transaction_from_record(r) for r in records]

    def delete(self, transaction_id: str) -> None:
        records = self._records()
        self.blob.write([r for r in records if r.get("id") != transaction_id])
        logger.debug("Deleted transaction %s", transaction_id)

    def delete_by_event_id(self, event_id: str) -> None:
        records = self._records()
        self.blob.write([r for r in records if r.get("eventId") != event_id])

    def delete_all(self) -> None:
        self.blob.write([])
        logger.debug("Deleted all transactions")


class KeyValueSettingsRepository(SettingsRepository):
    """Settings repository backed by a single JSON object."""

    def __init__(self, store: KeyValueStore, key: str = SETTINGS_KEY):
        self.blob = JsonBlob(store, key)

    def find(self) -> Optional[Settings]:
        record = self.blob.read(dict)
        if record is None:
            return None
        return settings_from_record(record)

    def save(self, settings: Settings) -> Settings:
        self.blob.write(settings.to_record())
        return settings
