from __future__ import annotations

import re
from typing import Optional

from ..core.constants import MAX_SEMESTER, MIN_SEMESTER
from ..core.exceptions import ValidationError

_NAME_RE = re.compile(r"^[a-zA-Z\s.'-]+$")
_IDENTIFIER_RE = re.compile(r"^[A-Z0-9]+$", re.IGNORECASE)
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PHONE_RE = re.compile(r"^[0-9+\-\s()]*$")


def normalize_identifier(value: Optional[str]) -> str:
    """Registration numbers compare case-insensitively and ignore surrounding blanks."""
    return (value or "").strip().upper()


def optional_text(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_max_length(value: str, field_name: str, max_len: int) -> str:
    if value is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} must be less than {max_len} characters")
    return value


def validate_name(value: Optional[str]) -> str:
    name = require_non_empty(value or "", "Name")
    require_min_length(name, "Name", 2)
    require_max_length(name, "Name", 100)
    if not _NAME_RE.match(name):
        raise ValidationError("Name can only contain letters, spaces, dots, hyphens, and apostrophes")
    return name


def validate_identifier(value: Optional[str]) -> str:
    identifier = require_non_empty(value or "", "Registration number")
    require_min_length(identifier, "Registration number", 5)
    require_max_length(identifier, "Registration number", 20)
    if not _IDENTIFIER_RE.match(identifier):
        raise ValidationError("Registration number can only contain letters and numbers")
    return normalize_identifier(identifier)


def validate_email(value: Optional[str], *, required: bool = False) -> Optional[str]:
    email = optional_text(value)
    if email is None:
        if required:
            raise ValidationError("Please enter a valid email address")
        return None
    require_max_length(email, "Email", 255)
    if not _EMAIL_RE.match(email):
        raise ValidationError("Please enter a valid email address")
    return email


def validate_department(value: Optional[str]) -> Optional[str]:
    department = optional_text(value)
    if department is not None:
        require_max_length(department, "Department", 100)
    return department


def validate_semester(value) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        semester = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Semester must be a whole number")
    if not MIN_SEMESTER <= semester <= MAX_SEMESTER:
        raise ValidationError(f"Semester must be between {MIN_SEMESTER} and {MAX_SEMESTER}")
    return semester


def validate_phone(value: Optional[str]) -> Optional[str]:
    phone = optional_text(value)
    if phone is None:
        return None
    require_max_length(phone, "Phone", 20)
    if not _PHONE_RE.match(phone):
        raise ValidationError("Phone can only contain numbers, spaces, and +-()")
    return phone


def require_int_range(value, field_name: str, *, low: int, high: Optional[int] = None) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number")
    if number < low or (high is not None and number > high):
        bounds = f"between {low} and {high}" if high is not None else f"at least {low}"
        raise ValidationError(f"{field_name} must be {bounds}")
    return number


def collect_errors(**checks) -> dict:
    """Run ``field -> callable`` checks and gather every message instead of stopping at the first.

    Returns a ``{field: cleaned_value}`` dict, or raises one ``ValidationError``
    carrying all field messages.
    """
    cleaned: dict = {}
    errors: dict[str, str] = {}
    for field, check in checks.items():
        try:
            cleaned[field] = check()
        except ValidationError as e:
            errors[field] = str(e)
    if errors:
        raise ValidationError(". ".join(errors.values()), errors)
    return cleaned
