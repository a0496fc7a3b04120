"""Domain helpers for student records: field validation and input sanitization."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

FIELDS = ("name", "sid", "email", "contact")

NAME_PATTERN = re.compile(r"[A-Za-z\s]+")
SID_PATTERN = re.compile(r"[0-9]+")
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+", re.IGNORECASE)
CONTACT_PATTERN = re.compile(r"[0-9]{10}")
RECORD_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]{1,64}")

_NAME_STRIP = re.compile(r"[^A-Za-z\s]")
_DIGIT_STRIP = re.compile(r"[^0-9]")

NAME_REQUIRED = "Name is required"
NAME_INVALID = "Name must have letters and spaces only"
SID_REQUIRED = "Student ID is required"
SID_INVALID = "Student ID must be numeric"
EMAIL_REQUIRED = "Email is required"
EMAIL_INVALID = "Enter a valid email"
CONTACT_REQUIRED = "Contact number is required"
CONTACT_INVALID = "Contact number must be exactly 10 digits"


@dataclass(frozen=True)
class StudentFields:
    """The four user-editable fields of a record."""

    name: str = ""
    sid: str = ""
    email: str = ""
    contact: str = ""

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "StudentFields":
        """Collect trimmed string values; missing keys become empty strings."""
        return cls(**{key: str(values.get(key) or "").strip() for key in FIELDS})

    def as_dict(self) -> dict[str, str]:
        return {key: getattr(self, key) for key in FIELDS}


@dataclass(frozen=True)
class StudentRecord:
    id: str
    name: str
    sid: str
    email: str
    contact: str

    @classmethod
    def create(cls, record_id: str, fields: StudentFields) -> "StudentRecord":
        return cls(id=record_id, **fields.as_dict())

    @classmethod
    def from_dict(cls, data: Any) -> Optional["StudentRecord"]:
        """Build a record from a stored object, or None when it is malformed."""
        if not isinstance(data, dict):
            return None
        keys = ("id",) + FIELDS
        if not all(isinstance(data.get(key), str) for key in keys):
            return None
        # Ids end up in URL paths.
        if not RECORD_ID_PATTERN.fullmatch(data["id"]):
            return None
        return cls(**{key: data[key] for key in keys})

    @property
    def fields(self) -> StudentFields:
        return StudentFields(name=self.name, sid=self.sid, email=self.email, contact=self.contact)

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, **self.fields.as_dict()}


# -------------------------- validators --------------------------
def validate_name(value: str | None) -> str:
    name = (value or "").strip()
    if not name:
        return NAME_REQUIRED
    if not NAME_PATTERN.fullmatch(name):
        return NAME_INVALID
    return ""


def validate_sid(value: str | None) -> str:
    sid = (value or "").strip()
    if not sid:
        return SID_REQUIRED
    if not SID_PATTERN.fullmatch(sid):
        return SID_INVALID
    return ""


def validate_email(value: str | None) -> str:
    email = (value or "").strip()
    if not email:
        return EMAIL_REQUIRED
    if not EMAIL_PATTERN.fullmatch(email):
        return EMAIL_INVALID
    return ""


def validate_contact(value: str | None) -> str:
    contact = (value or "").strip()
    if not contact:
        return CONTACT_REQUIRED
    if not CONTACT_PATTERN.fullmatch(contact):
        return CONTACT_INVALID
    return ""


VALIDATORS: dict[str, Callable[[str | None], str]] = {
    "name": validate_name,
    "sid": validate_sid,
    "email": validate_email,
    "contact": validate_contact,
}


def validate_fields(values: Mapping[str, Any]) -> dict[str, str]:
    """
    Run every validator and return the failing ones as {field: message}.

    All four run unconditionally so the caller can surface every error at once.
    """
    errors: dict[str, str] = {}
    for field, validator in VALIDATORS.items():
        raw = values.get(field)
        message = validator(None if raw is None else str(raw))
        if message:
            errors[field] = message
    return errors


# -------------------------- sanitizers --------------------------
def sanitize_name(value: str | None) -> str:
    """Drop everything except letters and whitespace."""
    return _NAME_STRIP.sub("", value or "")


def sanitize_digits(value: str | None) -> str:
    return _DIGIT_STRIP.sub("", value or "")


SANITIZERS: dict[str, Callable[[str | None], str]] = {
    "name": sanitize_name,
    "sid": sanitize_digits,
    "contact": sanitize_digits,
}


def sanitize_field(field: str, value: str | None) -> str:
    """Apply the keystroke filter for ``field``; fields without one pass through."""
    if field not in FIELDS:
        raise KeyError(f"Unknown field: {field}")
    sanitizer = SANITIZERS.get(field)
    if sanitizer is None:
        return value or ""
    return sanitizer(value)
