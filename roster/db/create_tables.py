"""Create the storage_slots table (run as ``python -m roster.db.create_tables``)."""
from __future__ import annotations

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from .session import Base, get_engine
from . import models  # noqa: F401  # registers StorageSlot on Base.metadata


def create_all(database_url: str | None = None) -> list[str]:
    """Create missing tables; returns the table names now present."""
    engine = get_engine(database_url)
    Base.metadata.create_all(bind=engine)
    return sorted(inspect(engine).get_table_names())


if __name__ == "__main__":
    try:
        tables = create_all()
    except (SQLAlchemyError, RuntimeError) as exc:
        raise SystemExit(f"Failed to create tables: {exc}") from exc
    print(f"Tables ready: {', '.join(tables)}")
