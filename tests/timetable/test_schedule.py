from __future__ import annotations

from datetime import date

from student_portal.core.enums import ClassType
from student_portal.timetable.schedule import WEEKLY_TIMETABLE, classes_for_day


def test_week_runs_monday_to_friday():
    assert list(WEEKLY_TIMETABLE) == ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
    assert all(len(slots) == 4 for slots in WEEKLY_TIMETABLE.values())


def test_classes_for_weekday(fixed_now):
    slots = classes_for_day(fixed_now.date())
    assert slots == WEEKLY_TIMETABLE["Wednesday"]
    assert slots[0].subject == "Web Development"


def test_weekend_has_no_classes():
    assert classes_for_day(date(2026, 1, 31)) == ()


def test_slot_badge_by_type():
    lab = WEEKLY_TIMETABLE["Monday"][2]
    assert lab.type == ClassType.LAB
    assert lab.css_class == "bg-success"
