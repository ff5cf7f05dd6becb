"""Mapper functions to convert stored records into domain entities.

Stored records are plain camelCase dicts. A record that no longer passes
entity validation is reported as a StorageError, since the problem lies in
the stored data rather than in user input.
"""

from typing import Any

from gigbook.domain.entities import Event, Settings, Transaction
from gigbook.domain.errors import StorageError, ValidationError


def event_from_record(record: dict[str, Any]) -> Event:
    """Convert a stored event record to an Event entity."""
    try:
        return Event.restore(record)
    except ValidationError as e:
        raise StorageError(f"Stored event '{record.get('id')}' is invalid: {e}") from e


def transaction_from_record(record: dict[str, Any]) -> Transaction:
    """Convert a stored transaction record to a Transaction entity."""
    try:
        return Transaction.restore(record)
    except ValidationError as e:
        raise StorageError(f"Stored transaction '{record.get('id')}' is invalid: {e}") from e


def settings_from_record(record: dict[str, Any]) -> Settings:
    """Convert a stored settings record to a Settings entity."""
    try:
        return Settings.restore(record)
    except ValidationError as e:
        raise StorageError(f"Stored settings are invalid: {e}") from e
