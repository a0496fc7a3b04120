"""Engine/session helpers for the SQL storage backend."""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from roster.core.config import get_settings

Base = declarative_base()

_engines: Dict[str, Engine] = {}
_sessionmakers: Dict[str, sessionmaker] = {}
_lock = threading.Lock()


def _resolve_url(database_url: Optional[str]) -> str:
    url = (database_url or get_settings().database_url or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL must be configured when ROSTER_STORAGE_BACKEND=sql.")
    return url


def get_engine(database_url: Optional[str] = None) -> Engine:
    """Engine for ``database_url``, falling back to DATABASE_URL; one per URL."""
    url = _resolve_url(database_url)
    with _lock:
        engine = _engines.get(url)
        if engine is None:
            connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
            engine = create_engine(url, future=True, pool_pre_ping=True, connect_args=connect_args)
            _engines[url] = engine
            _sessionmakers[url] = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)
        return engine


def reset_engine() -> None:
    """Dispose every cached engine and forget cached settings (used after env changes)."""
    with _lock:
        for engine in _engines.values():
            engine.dispose()
        _engines.clear()
        _sessionmakers.clear()
    get_settings.cache_clear()


@contextmanager
def get_session(database_url: Optional[str] = None) -> Iterator[Session]:
    url = _resolve_url(database_url)
    get_engine(url)
    session: Session = _sessionmakers[url]()
    try:
        yield session
    finally:
        session.close()
