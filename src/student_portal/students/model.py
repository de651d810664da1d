from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(frozen=True)
class SubjectAttendance:
    present: int = 0
    total: int = 0


@dataclass(frozen=True)
class SubjectMarks:
    internal1: int = 0
    internal2: int = 0
    external: int = 0

    @property
    def total(self) -> int:
        return self.internal1 + self.internal2 + self.external


@dataclass(frozen=True)
class StudentRecord:
    """Domain entity: a student's profile plus per-subject attendance and marks.

    Subject dicts keep insertion order, which is the display order.
    ``revision`` increases on every write and guards concurrent edits.
    """

    id: str
    reg_number: str
    name: str
    owner_id: Optional[str] = None
    department: Optional[str] = None
    semester: Optional[int] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    is_placeholder: bool = False
    revision: int = 0
    attendance: Dict[str, SubjectAttendance] = field(default_factory=dict)
    marks: Dict[str, SubjectMarks] = field(default_factory=dict)


@dataclass(frozen=True)
class StudentProfile:
    """Editable profile fields, already validated."""

    name: str
    reg_number: str
    department: Optional[str] = None
    semester: Optional[int] = None
    email: Optional[str] = None
    phone: Optional[str] = None
