from __future__ import annotations

import logging

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from roster.core import csrf
from roster.domain.students import validate_sid
from roster.repositories.kv_store import StorageError
from roster.services.form_controller import FormController
from roster.services.roster_display import RosterRenderer

router = APIRouter(prefix="", tags=["students"])
logger = logging.getLogger(__name__)

SAVE_FAILED = "Could not save the roster. Please try again."


def _get_controller(request: Request) -> FormController:
    controller = getattr(getattr(request.app, "state", None), "controller", None)
    if not controller:
        raise RuntimeError("FormController not configured")
    return controller


def _get_renderer(request: Request) -> RosterRenderer:
    renderer = getattr(getattr(request.app, "state", None), "renderer", None)
    if not renderer:
        raise RuntimeError("RosterRenderer not configured")
    return renderer


def _templates(request: Request) -> Jinja2Templates:
    tpl = getattr(getattr(request.app, "state", None), "templates", None)
    if tpl:
        return tpl
    raise RuntimeError("Templates not configured")


def _home() -> RedirectResponse:
    return RedirectResponse("/", status_code=303)


def _render_roster_page(request: Request, *, status_code: int = 200, notice: str = "") -> HTMLResponse:
    controller = _get_controller(request)
    csrf_token = csrf.current_token(request)
    context = {
        "request": request,
        "view": _get_renderer(request).view,
        "values": controller.values,
        "errors": controller.errors,
        "submit_label": controller.submit_label,
        "editing_id": controller.editing_id,
        "notice": notice,
        "csrf_token": csrf_token,
    }
    response = _templates(request).TemplateResponse("roster.html", context, status_code=status_code)
    return csrf.attach_token(request, response, csrf_token)


@router.get("/", response_class=HTMLResponse)
def roster_page(request: Request):
    return _render_roster_page(request)


@router.post("/students")
def submit_student(
    request: Request,
    name: str = Form(""),
    sid: str = Form(""),
    email: str = Form(""),
    contact: str = Form(""),
    csrf_token: str = Form(""),
):
    csrf.require_token(request, csrf_token)
    controller = _get_controller(request)
    try:
        result = controller.submit({"name": name, "sid": sid, "email": email, "contact": contact})
    except StorageError as exc:
        logger.error("Saving the roster failed: %s", exc)
        return _render_roster_page(request, status_code=503, notice=SAVE_FAILED)
    if not result.ok:
        return _render_roster_page(request, status_code=400)
    return _home()


@router.post("/students/clear")
def clear_form(request: Request, csrf_token: str = Form("")):
    csrf.require_token(request, csrf_token)
    _get_controller(request).clear()
    return _home()


@router.get("/students/check-sid")
def check_sid(request: Request, value: str = "", exclude: str = ""):
    candidate = (value or "").strip()
    if validate_sid(candidate):
        return {"available": False}
    store = _get_controller(request).store
    return {"available": not store.has_duplicate_sid(candidate, excluding_id=exclude or None)}


@router.post("/students/{record_id}/edit")
def begin_edit(record_id: str, request: Request, csrf_token: str = Form("")):
    csrf.require_token(request, csrf_token)
    _get_controller(request).begin_edit(record_id)
    return _home()


@router.get("/students/{record_id}/delete", response_class=HTMLResponse)
def confirm_delete(record_id: str, request: Request):
    record = _get_controller(request).store.find_by_id(record_id)
    if not record:
        return _home()
    csrf_token = csrf.current_token(request)
    response = _templates(request).TemplateResponse(
        "confirm_delete.html",
        {"request": request, "record": record, "csrf_token": csrf_token},
    )
    return csrf.attach_token(request, response, csrf_token)


@router.post("/students/{record_id}/delete")
def delete_student(record_id: str, request: Request, confirm: str = Form("no"), csrf_token: str = Form("")):
    csrf.require_token(request, csrf_token)
    controller = _get_controller(request)
    approved = (confirm or "").strip().lower() == "yes"
    try:
        controller.request_delete(record_id, lambda: approved)
    except StorageError as exc:
        logger.error("Deleting %s failed: %s", record_id, exc)
        return _render_roster_page(request, status_code=503, notice=SAVE_FAILED)
    return _home()
