"""
End-to-end checks of the roster page through FastAPI's TestClient.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Make the roster package importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from roster.app import create_app  # noqa: E402
from roster.core.config import Settings  # noqa: E402
from roster.repositories.kv_store import MemoryStore, StorageError  # noqa: E402

ANN = {"name": "Ann Lee", "sid": "1001", "email": "a@b.com", "contact": "1234567890"}


class FlakyStore(MemoryStore):
    fail = False

    def set(self, key, value):
        if self.fail:
            raise StorageError("quota exceeded")
        super().set(key, value)


@pytest.fixture()
def kv():
    return FlakyStore()


@pytest.fixture()
def app(kv):
    return create_app(Settings(storage_backend="memory"), store=kv)


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


def _token(client: TestClient) -> str:
    client.get("/")
    token = client.cookies.get("csrf_token")
    assert token
    return token


def _add(client: TestClient, **overrides):
    data = dict(ANN, **overrides)
    data["csrf_token"] = _token(client)
    return client.post("/students", data=data, follow_redirects=False)


def test_empty_page(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "No students registered yet." in resp.text
    assert ">Save</button>" in resp.text
    assert resp.headers["x-frame-options"] == "DENY"


def test_add_redirects_and_lists_record(client, app):
    resp = _add(client)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/"
    page = client.get("/").text
    assert "<td>Ann Lee</td>" in page
    assert len(app.state.roster) == 1


def test_validation_errors_render_with_400(client, app):
    resp = _add(client, name="", contact="12345")
    assert resp.status_code == 400
    assert "Name is required" in resp.text
    assert "Contact number must be exactly 10 digits" in resp.text
    assert len(app.state.roster) == 0


def test_duplicate_sid_renders_error(client, app):
    _add(client)
    resp = _add(client, name="Bob Ray")
    assert resp.status_code == 400
    assert "This Student ID already exists" in resp.text
    assert len(app.state.roster) == 1


def test_edit_flow_switches_label_and_updates(client, app):
    _add(client)
    record = app.state.roster.records[0]
    token = _token(client)
    resp = client.post(f"/students/{record.id}/edit", data={"csrf_token": token}, follow_redirects=False)
    assert resp.status_code == 303
    page = client.get("/").text
    assert ">Update</button>" in page
    assert 'value="Ann Lee"' in page

    resp = _add(client, name="Ann M Lee")
    assert resp.status_code == 303
    records = app.state.roster.records
    assert len(records) == 1
    assert records[0].id == record.id
    assert records[0].name == "Ann M Lee"
    assert ">Save</button>" in client.get("/").text


def test_clear_leaves_edit_mode(client, app):
    _add(client)
    record = app.state.roster.records[0]
    token = _token(client)
    client.post(f"/students/{record.id}/edit", data={"csrf_token": token})
    client.post("/students/clear", data={"csrf_token": token})
    assert app.state.controller.editing_id is None
    assert len(app.state.roster) == 1


def test_delete_confirmation_gate(client, app):
    _add(client)
    record = app.state.roster.records[0]
    confirm_page = client.get(f"/students/{record.id}/delete")
    assert confirm_page.status_code == 200
    assert "Are you sure you want to delete this student?" in confirm_page.text

    token = _token(client)
    client.post(f"/students/{record.id}/delete", data={"csrf_token": token, "confirm": "no"})
    assert len(app.state.roster) == 1
    client.post(f"/students/{record.id}/delete", data={"csrf_token": token, "confirm": "yes"})
    assert len(app.state.roster) == 0


def test_confirm_page_for_unknown_id_redirects(client):
    resp = client.get("/students/nope/delete", follow_redirects=False)
    assert resp.status_code == 303


def test_posts_require_csrf_token(client, app):
    client.get("/")
    resp = client.post("/students", data=ANN)
    assert resp.status_code == 403
    assert len(app.state.roster) == 0


def test_rendered_values_are_escaped(client):
    _add(client, email="x<b@c.com")
    page = client.get("/").text
    assert "x&lt;b@c.com" in page
    assert "x<b@c.com" not in page


def test_failed_write_returns_503_and_keeps_roster(client, app, kv):
    kv.fail = True
    resp = _add(client)
    assert resp.status_code == 503
    assert "Could not save the roster" in resp.text
    assert len(app.state.roster) == 0


def test_check_sid(client):
    _add(client)
    assert client.get("/students/check-sid", params={"value": "1001"}).json() == {"available": False}
    assert client.get("/students/check-sid", params={"value": "2002"}).json() == {"available": True}
    assert client.get("/students/check-sid", params={"value": "abc"}).json() == {"available": False}


def test_contact_input_does_not_truncate_pasted_values(client, app):
    page = client.get("/").text
    contact_input = next(line for line in page.splitlines() if 'id="contact"' in line)
    assert "maxlength" not in contact_input

    resp = _add(client, contact="12345678901")
    assert resp.status_code == 400
    assert "Contact number must be exactly 10 digits" in resp.text
    resp = _add(client, contact="555-123-4567")
    assert resp.status_code == 400
    assert len(app.state.roster) == 0


def test_csrf_cookie_follows_app_settings():
    dev = create_app(Settings(storage_backend="memory"), store=MemoryStore())
    prod = create_app(Settings(app_env="prod", storage_backend="memory"), store=MemoryStore())
    with TestClient(dev) as c:
        assert "secure" not in c.get("/").headers["set-cookie"].lower()
    with TestClient(prod) as c:
        assert "secure" in c.get("/").headers["set-cookie"].lower()
