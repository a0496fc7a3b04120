"""
Double-submit CSRF protection for the roster forms.

Pages embed the token from the ``csrf_token`` cookie in a hidden field; every
POST must echo it back (form field or ``x-csrf-token`` header).
"""
from __future__ import annotations

import secrets
from urllib import parse as urlparse

from fastapi import HTTPException, Request, Response

from roster.core.config import get_settings

COOKIE_NAME = "csrf_token"
HEADER_NAME = "x-csrf-token"
TOKEN_TTL_SECONDS = 24 * 60 * 60
MIN_TOKEN_LENGTH = 16


def current_token(request: Request) -> str:
    """Reuse the browser's token when it looks sane, otherwise mint a new one."""
    token = request.cookies.get(COOKIE_NAME) or ""
    if len(token) < MIN_TOKEN_LENGTH:
        token = secrets.token_urlsafe(32)
    return token


def attach_token(request: Request, response: Response, token: str) -> Response:
    settings = getattr(request.app.state, "settings", None) or get_settings()
    response.set_cookie(
        COOKIE_NAME,
        token,
        max_age=TOKEN_TTL_SECONDS,
        httponly=False,
        secure=settings.app_env == "prod",
        samesite="strict",
        path="/",
    )
    return response


def _same_origin(request: Request) -> bool:
    source = request.headers.get("origin") or request.headers.get("referer") or ""
    if not source:
        return True
    try:
        source_host = (urlparse.urlparse(source).hostname or "").lower()
    except ValueError:
        return False
    host = (request.headers.get("host") or "").split(":", 1)[0].lower()
    return not (source_host and host) or source_host == host


def require_token(request: Request, supplied: str | None) -> None:
    """Raise 403 unless ``supplied`` (or the header) matches the cookie."""
    expected = request.cookies.get(COOKIE_NAME)
    token = (supplied or "").strip() or (request.headers.get(HEADER_NAME) or "").strip()
    if not expected or not token:
        raise HTTPException(403, "Missing CSRF token.")
    if not secrets.compare_digest(expected, token):
        raise HTTPException(403, "Invalid CSRF token.")
    if not _same_origin(request):
        raise HTTPException(403, "Invalid origin.")
