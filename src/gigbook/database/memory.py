"""In-memory key-value store."""

from typing import Optional

from gigbook.database.base import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)
