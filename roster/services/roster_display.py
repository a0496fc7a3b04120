"""Helpers for projecting the roster into table rows."""
from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from roster.domain.students import StudentRecord
from roster.services.roster_store import RosterStore

SCROLL_THRESHOLD = 5
SCROLL_MAX_HEIGHT = "300px"
EMPTY_MESSAGE = "No students registered yet."


def escape_markup(value: object) -> str:
    return html.escape("" if value is None else str(value), quote=True)


@dataclass(frozen=True)
class DisplayRow:
    position: int
    record_id: str
    name: str
    sid: str
    email: str
    contact: str


@dataclass(frozen=True)
class RosterView:
    rows: Tuple[DisplayRow, ...]
    placeholder: Optional[str]
    scrollable: bool

    @property
    def wrapper_style(self) -> str:
        if self.scrollable:
            return f"overflow-y: auto; max-height: {SCROLL_MAX_HEIGHT}"
        return "overflow: hidden; max-height: none"


def render_roster(records: Sequence[StudentRecord]) -> RosterView:
    """One escaped row per record, or a placeholder when the roster is empty."""
    rows = tuple(
        DisplayRow(
            position=index,
            record_id=record.id,
            name=escape_markup(record.name),
            sid=escape_markup(record.sid),
            email=escape_markup(record.email),
            contact=escape_markup(record.contact),
        )
        for index, record in enumerate(records, start=1)
    )
    return RosterView(
        rows=rows,
        placeholder=None if rows else EMPTY_MESSAGE,
        scrollable=len(rows) > SCROLL_THRESHOLD,
    )


class RosterRenderer:
    """Keeps ``view`` in sync with the store by listening to its changes."""

    def __init__(self, store: RosterStore) -> None:
        self.view = render_roster(store.records)
        self._unsubscribe = store.subscribe(self.refresh)

    def refresh(self, records: Sequence[StudentRecord]) -> RosterView:
        self.view = render_roster(records)
        return self.view

    def close(self) -> None:
        self._unsubscribe()
