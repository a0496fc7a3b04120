"""Key-value store contract shared by the storage providers."""

from __future__ import annotations

from typing import Dict, Optional, Protocol


class StorageError(Exception):
    """Raised by providers when the underlying store cannot be read or written."""


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStore:
    """Process-local store; contents are lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
