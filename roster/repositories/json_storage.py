"""
JSON-file key-value store.

The file holds one JSON object mapping slot names to their string values,
the same shape a browser's localStorage exposes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional
import json

from roster.repositories.kv_store import StorageError


class JsonFileStore:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            raise StorageError(f"Could not read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"{self.path} does not hold a JSON object")
        return data

    def _save(self, data: dict) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Could not write {self.path}: {exc}") from exc

    def get(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            data = self._load()
        except StorageError:
            # An unreadable file is replaced wholesale rather than blocking every write.
            data = {}
        data[key] = value
        self._save(data)
