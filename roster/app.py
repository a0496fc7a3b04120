import os
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.base import BaseHTTPMiddleware

from roster.core.config import Settings, get_settings
from roster.core.log import configure_logging
from roster.repositories.json_storage import JsonFileStore
from roster.repositories.kv_store import KeyValueStore, MemoryStore
from roster.repositories.roster_storage import RosterStorage
from roster.routers import students as students_router
from roster.services.form_controller import FormController
from roster.services.roster_display import RosterRenderer
from roster.services.roster_store import RosterStore

BASE = os.path.dirname(__file__)
WEB = os.path.join(BASE, "..", "web")
TEMPLATES = os.path.join(BASE, "..", "templates")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (CSP, anti clickjacking, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault(
            "Content-Security-Policy",
            "default-src 'self'; style-src 'self' 'unsafe-inline'; script-src 'self'; form-action 'self'",
        )
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "same-origin")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def build_store(settings: Settings) -> KeyValueStore:
    """Pick the key-value provider named by ROSTER_STORAGE_BACKEND."""
    if settings.storage_backend == "memory":
        return MemoryStore()
    if settings.storage_backend == "sql":
        # Imported lazily so the JSON backend never needs a database driver configured.
        from roster.db.create_tables import create_all
        from roster.repositories.sql_storage import SQLKeyValueStore

        create_all(settings.database_url or None)
        return SQLKeyValueStore(settings.database_url or None)
    return JsonFileStore(settings.data_file)


def create_app(settings: Optional[Settings] = None, *, store: Optional[KeyValueStore] = None) -> FastAPI:
    """Factory compatible with uvicorn/gunicorn (``--factory``)."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Student Roster")
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")
    app.mount("/static", StaticFiles(directory=WEB), name="static")

    if store is None:
        store = build_store(settings)
    roster = RosterStore(RosterStorage(store, key=settings.storage_key))
    app.state.settings = settings
    app.state.templates = Jinja2Templates(directory=TEMPLATES)
    app.state.roster = roster
    app.state.controller = FormController(roster)
    app.state.renderer = RosterRenderer(roster)

    app.include_router(students_router.router)
    return app
