"""
Form use cases for the roster page.

The controller owns the form values and the per-field errors, and moves
between two modes: adding a new record and editing an existing one (the
edit target lives on the RosterStore). Routers call these methods instead of
touching the store directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Mapping, Optional

from roster.domain.students import (
    FIELDS,
    StudentFields,
    StudentRecord,
    sanitize_field,
    validate_fields,
)
from roster.services.roster_store import RosterStore

ADD_LABEL = "Save"
UPDATE_LABEL = "Update"
DUPLICATE_SID_ERROR = "This Student ID already exists"


class FormMode(str, Enum):
    ADDING = "adding"
    EDITING = "editing"


def _empty_values() -> Dict[str, str]:
    return {key: "" for key in FIELDS}


@dataclass
class SubmitResult:
    ok: bool
    errors: Dict[str, str] = field(default_factory=dict)
    record: Optional[StudentRecord] = None
    action: Optional[str] = None  # "added" | "updated"


class FormController:
    def __init__(self, store: RosterStore) -> None:
        self.store = store
        self.values: Dict[str, str] = _empty_values()
        self.errors: Dict[str, str] = {}

    # -------------------------------------- state --------------------------------------
    @property
    def editing_id(self) -> Optional[str]:
        return self.store.editing_id

    @property
    def mode(self) -> FormMode:
        return FormMode.EDITING if self.editing_id else FormMode.ADDING

    @property
    def submit_label(self) -> str:
        return UPDATE_LABEL if self.mode is FormMode.EDITING else ADD_LABEL

    # -------------------------------------- actions --------------------------------------
    def input(self, field_name: str, value: str) -> str:
        """Keystroke handler: sanitize ``value`` for ``field_name`` and keep it."""
        cleaned = sanitize_field(field_name, value)
        self.values[field_name] = cleaned
        return cleaned

    def begin_edit(self, record_id: str) -> bool:
        with self.store.lock:
            record = self.store.begin_edit(record_id)
            if record is None:
                return False
            self.values = record.fields.as_dict()
            self.errors = {}
            return True

    def clear(self) -> None:
        with self.store.lock:
            self.values = _empty_values()
            self.errors = {}
            self.store.end_edit()

    def submit(self, values: Optional[Mapping[str, str]] = None) -> SubmitResult:
        """
        Validate the form and add or update a record.

        On any error the form keeps its values and mode and nothing is
        written. A successful submit always returns to adding mode.
        The duplicate check and the write run under the store lock.
        """
        with self.store.lock:
            if values is not None:
                self.values = {key: str(values.get(key) or "") for key in FIELDS}
            fields = StudentFields.from_mapping(self.values)

            errors = validate_fields(fields.as_dict())
            if errors:
                self.errors = errors
                return SubmitResult(ok=False, errors=dict(errors))

            editing_id = self.editing_id
            if self.store.has_duplicate_sid(fields.sid, excluding_id=editing_id):
                self.errors = {"sid": DUPLICATE_SID_ERROR}
                return SubmitResult(ok=False, errors=dict(self.errors))

            if editing_id:
                record = self.store.update(editing_id, fields)
                action = "updated"
            else:
                record = self.store.add(fields)
                action = "added"
            self.clear()
            return SubmitResult(ok=True, record=record, action=action)

    def request_delete(self, record_id: str, confirm: Callable[[], bool]) -> bool:
        with self.store.lock:
            removed = self.store.delete(record_id, confirm)
            if removed and record_id == self.editing_id:
                self.clear()
            return removed
