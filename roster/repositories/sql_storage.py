"""Key-value store backed by the ``storage_slots`` SQL table."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from roster.db.models import StorageSlot
from roster.db.session import get_session
from roster.repositories.kv_store import StorageError


class SQLKeyValueStore:
    """get/set helpers wrapping the SQLAlchemy session.

    ``database_url`` overrides DATABASE_URL from the environment.
    """

    def __init__(self, database_url: Optional[str] = None) -> None:
        self.database_url = database_url or None

    def get(self, key: str) -> Optional[str]:
        try:
            with get_session(self.database_url) as session:
                slot = session.get(StorageSlot, key)
                return slot.value if slot else None
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not read slot {key!r}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc)
        try:
            with get_session(self.database_url) as session:
                slot = session.get(StorageSlot, key)
                if not slot:
                    session.add(StorageSlot(key=key, value=value, updated_at=now))
                else:
                    slot.value = value
                    slot.updated_at = now
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not write slot {key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            with get_session(self.database_url) as session:
                slot = session.get(StorageSlot, key)
                if slot:
                    session.delete(slot)
                    session.commit()
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not delete slot {key!r}: {exc}") from exc
