"""In-memory roster mirrored to the persistence slot."""
from __future__ import annotations

import logging
import threading
import uuid
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from roster.domain.students import StudentFields, StudentRecord
from roster.repositories.roster_storage import RosterStorage

logger = logging.getLogger(__name__)

ChangeListener = Callable[[Sequence[StudentRecord]], None]


def new_record_id() -> str:
    """Random UUID4 hex (122 random bits, ~2**-122 collision chance per pair)."""
    return uuid.uuid4().hex


class RosterStore:
    """
    Ordered student records plus the id currently being edited.

    Every mutation saves the new sequence before replacing the in-memory one,
    so a failed write leaves both copies as they were.
    """

    def __init__(self, storage: RosterStorage, *, id_factory: Callable[[], str] = new_record_id) -> None:
        self.storage = storage
        self._id_factory = id_factory
        self._records: List[StudentRecord] = storage.load()
        self._listeners: List[ChangeListener] = []
        # FormController holds this across check-then-write; must stay reentrant.
        self.lock = threading.RLock()
        self.editing_id: Optional[str] = None

    # -------------------------- queries --------------------------
    @property
    def records(self) -> Tuple[StudentRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[StudentRecord]:
        return iter(tuple(self._records))

    def find_by_id(self, record_id: str | None) -> Optional[StudentRecord]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def has_duplicate_sid(self, sid: str, excluding_id: str | None = None) -> bool:
        return any(record.sid == sid and record.id != excluding_id for record in self._records)

    # -------------------------- listeners --------------------------
    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.records
        for listener in list(self._listeners):
            listener(snapshot)

    def _commit(self, records: List[StudentRecord]) -> None:
        self.storage.save(records)
        self._records = records
        self._notify()

    # -------------------------- mutations --------------------------
    def _allocate_id(self) -> str:
        record_id = self._id_factory()
        while self.find_by_id(record_id) is not None:
            record_id = self._id_factory()
        return record_id

    def add(self, fields: StudentFields) -> StudentRecord:
        with self.lock:
            record = StudentRecord.create(self._allocate_id(), fields)
            self._commit(self._records + [record])
        logger.info("Added student %s (sid=%s)", record.id, record.sid)
        return record

    def update(self, record_id: str, fields: StudentFields) -> Optional[StudentRecord]:
        """Replace the fields of ``record_id`` in place; unknown ids are ignored."""
        with self.lock:
            for index, current in enumerate(self._records):
                if current.id == record_id:
                    break
            else:
                logger.debug("Update ignored, no record %s", record_id)
                return None
            record = StudentRecord.create(record_id, fields)
            records = list(self._records)
            records[index] = record
            self._commit(records)
            logger.info("Updated student %s", record_id)
            return record

    def delete(self, record_id: str, confirm: Callable[[], bool]) -> bool:
        """
        Remove ``record_id`` once ``confirm()`` says yes.

        Nothing is written when the user declines or the id is gone. Returns
        True only when a record was removed.
        """
        with self.lock:
            if not confirm():
                return False
            records = [record for record in self._records if record.id != record_id]
            if len(records) == len(self._records):
                logger.debug("Delete ignored, no record %s", record_id)
                return False
            self._commit(records)
            logger.info("Deleted student %s", record_id)
            return True

    # -------------------------- edit marker --------------------------
    def begin_edit(self, record_id: str) -> Optional[StudentRecord]:
        with self.lock:
            record = self.find_by_id(record_id)
            if record is not None:
                self.editing_id = record_id
            return record

    def end_edit(self) -> None:
        with self.lock:
            self.editing_id = None
