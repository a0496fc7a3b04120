"""Logging setup for the roster app (stdlib logging, one basic handler)."""

from __future__ import annotations

import logging

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler once; later calls only adjust the level."""
    resolved = getattr(logging, (level or "INFO").upper(), logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=resolved, format=LOG_FORMAT)
    root.setLevel(resolved)
