"""Load/save the roster as a JSON array in one key-value slot."""
from __future__ import annotations

import json
import logging
from typing import Iterable, List

from roster.core.config import DEFAULT_STORAGE_KEY
from roster.domain.students import StudentRecord
from roster.repositories.kv_store import KeyValueStore, StorageError

logger = logging.getLogger(__name__)


class RosterStorage:
    """
    Persistence adapter for the roster.

    ``load`` never raises: a missing, unreadable or malformed slot reads as an
    empty roster. ``save`` overwrites the whole slot and lets ``StorageError``
    propagate.
    """

    def __init__(self, store: KeyValueStore, key: str = DEFAULT_STORAGE_KEY) -> None:
        self.store = store
        self.key = key or DEFAULT_STORAGE_KEY

    def load(self) -> List[StudentRecord]:
        try:
            raw = self.store.get(self.key)
        except StorageError as exc:
            logger.error("Error reading storage slot %s: %s", self.key, exc)
            return []
        if not raw:
            return []
        try:
            parsed = json.loads(raw)
        except ValueError as exc:
            logger.error("Storage slot %s is not valid JSON: %s", self.key, exc)
            return []
        if not isinstance(parsed, list):
            logger.warning("Storage slot %s does not hold a list; ignoring it", self.key)
            return []

        records: List[StudentRecord] = []
        seen: set[str] = set()
        for index, item in enumerate(parsed):
            record = StudentRecord.from_dict(item)
            if record is None:
                logger.warning("Skipping malformed record at index %d in %s", index, self.key)
                continue
            if record.id in seen:
                logger.warning("Skipping duplicate record id %s in %s", record.id, self.key)
                continue
            seen.add(record.id)
            records.append(record)
        return records

    def save(self, records: Iterable[StudentRecord]) -> None:
        payload = [record.to_dict() for record in records]
        self.store.set(self.key, json.dumps(payload, ensure_ascii=False))
        logger.debug("Saved %d records to %s", len(payload), self.key)
