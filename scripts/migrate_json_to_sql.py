#!/usr/bin/env python3
"""
One-off migration: roster slot in the JSON data file -> SQL storage_slots table.

Usage:
  DATABASE_URL=sqlite:///roster.db python scripts/migrate_json_to_sql.py [--data-file roster/data.json] [--key student_registration_v1]
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Make the roster package importable when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from roster.core.config import get_settings
from roster.db.create_tables import create_all
from roster.repositories.json_storage import JsonFileStore
from roster.repositories.roster_storage import RosterStorage
from roster.repositories.sql_storage import SQLKeyValueStore


def migrate(data_file: Path, key: str, database_url: str | None = None) -> int:
    if not data_file.exists():
        raise SystemExit(f"File not found: {data_file}")
    records = RosterStorage(JsonFileStore(data_file), key=key).load()
    create_all(database_url)
    RosterStorage(SQLKeyValueStore(database_url), key=key).save(records)
    return len(records)


def main() -> None:
    settings = get_settings()
    ap = argparse.ArgumentParser(description="Copy the roster from the JSON file store into the SQL store")
    ap.add_argument("--data-file", default=settings.data_file, help="JSON data file (default: ROSTER_DATA_FILE)")
    ap.add_argument("--key", default=settings.storage_key, help="Storage slot name")
    ap.add_argument("--database-url", default=settings.database_url, help="Target database (default: DATABASE_URL)")
    args = ap.parse_args()

    count = migrate(Path(args.data_file), args.key, args.database_url or None)
    print(f"Migrated {count} student records to the SQL store.")


if __name__ == "__main__":
    main()
