"""Entry point for uvicorn: ``uvicorn roster.app_factory:app``."""
from roster.app import create_app

app = create_app()

__all__ = ["app", "create_app"]
