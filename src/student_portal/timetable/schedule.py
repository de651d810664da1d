from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Mapping, Optional, Sequence

from ..common.datetime_utils import today_weekday_name
from ..core.enums import ClassType


@dataclass(frozen=True)
class ClassSlot:
    time: str
    subject: str
    room: str
    type: ClassType

    @property
    def css_class(self) -> str:
        return {
            ClassType.LECTURE: "bg-primary",
            ClassType.LAB: "bg-success",
            ClassType.TUTORIAL: "bg-warning text-dark",
        }.get(self.type, "bg-secondary")


def _slot(time: str, subject: str, room: str, kind: ClassType) -> ClassSlot:
    return ClassSlot(time=time, subject=subject, room=room, type=kind)


L, P, T = ClassType.LECTURE, ClassType.LAB, ClassType.TUTORIAL

WEEKLY_TIMETABLE: Mapping[str, Sequence[ClassSlot]] = {
    "Monday": (
        _slot("9:00 - 10:00", "Data Structures", "301", L),
        _slot("10:15 - 11:15", "Operating Systems", "205", L),
        _slot("11:30 - 12:30", "Web Development", "Lab 4", P),
        _slot("2:00 - 3:00", "Database Management", "302", L),
    ),
    "Tuesday": (
        _slot("9:00 - 10:00", "Software Engineering", "201", L),
        _slot("10:15 - 11:15", "Data Structures", "Lab 2", P),
        _slot("11:30 - 12:30", "Operating Systems", "203", L),
        _slot("2:00 - 3:00", "Database Management", "Lab 3", P),
    ),
    "Wednesday": (
        _slot("9:00 - 10:00", "Web Development", "301", L),
        _slot("10:15 - 11:15", "Software Engineering", "Lab 1", P),
        _slot("11:30 - 12:30", "Data Structures", "205", T),
        _slot("2:00 - 3:00", "Operating Systems", "Lab 5", P),
    ),
    "Thursday": (
        _slot("9:00 - 10:00", "Database Management", "302", L),
        _slot("10:15 - 11:15", "Web Development", "203", T),
        _slot("11:30 - 12:30", "Software Engineering", "201", L),
        _slot("2:00 - 3:00", "Data Structures", "301", L),
    ),
    "Friday": (
        _slot("9:00 - 10:00", "Operating Systems", "205", T),
        _slot("10:15 - 11:15", "Database Management", "302", T),
        _slot("11:30 - 12:30", "Web Development", "Lab 4", P),
        _slot("2:00 - 3:00", "Software Engineering", "Lab 2", P),
    ),
}


def classes_for_day(day: Optional[date] = None) -> Sequence[ClassSlot]:
    """Slots for ``day`` (default today); weekends have none."""
    return WEEKLY_TIMETABLE.get(today_weekday_name(day), ())
