"""
Configuration helpers for the roster backend.

Settings are read once from environment variables (storage backend, data
file, database URL, slot key, log level) and cached; tests call
``get_settings.cache_clear()`` after changing the environment.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

DEFAULT_DATA_FILE = Path(__file__).resolve().parents[1] / "data.json"
DEFAULT_STORAGE_KEY = "student_registration_v1"
STORAGE_BACKENDS = {"json", "sql", "memory"}


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str = "dev"
    storage_backend: str = "json"
    data_file: str = str(DEFAULT_DATA_FILE)
    database_url: str = ""
    storage_key: str = DEFAULT_STORAGE_KEY
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    backend = (os.getenv("ROSTER_STORAGE_BACKEND") or "json").strip().lower()
    if backend not in STORAGE_BACKENDS:
        backend = "json"

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        storage_backend=backend,
        data_file=os.getenv("ROSTER_DATA_FILE") or str(DEFAULT_DATA_FILE),
        database_url=os.getenv("DATABASE_URL", ""),
        storage_key=(os.getenv("ROSTER_STORAGE_KEY") or DEFAULT_STORAGE_KEY).strip(),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
