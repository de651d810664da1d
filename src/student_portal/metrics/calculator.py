"""Pure academic-metric functions.

Nothing here validates bounds: the marks scheme caps each component, but the
calculator reports whatever totals it is given.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping

from ..core.constants import LOW_ATTENDANCE_THRESHOLD, MAX_GRADE_POINT, MAX_TOTAL_MARKS
from ..students.model import SubjectMarks

GRADE_BANDS = (
    (90, "O"),
    (80, "A+"),
    (70, "A"),
    (60, "B+"),
    (50, "B"),
)
LOWEST_GRADE = "C"


def round_half_up(value: float, digits: int) -> float:
    """Decimal rounding as shown to users (0.05 -> 0.1), not banker's rounding."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def attendance_percentage(present: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round_half_up(present * 100 / total, 1)


def is_low_attendance(percentage: float, threshold: float = LOW_ATTENDANCE_THRESHOLD) -> bool:
    return percentage < threshold


def grade_point(internal1: int, internal2: int, external: int) -> float:
    total = internal1 + internal2 + external
    return total * MAX_GRADE_POINT / MAX_TOTAL_MARKS


def marks_percentage(total: float) -> float:
    return total * 100 / MAX_TOTAL_MARKS


def letter_grade(total: float) -> str:
    percentage = marks_percentage(total)
    for threshold, letter in GRADE_BANDS:
        if percentage >= threshold:
            return letter
    return LOWEST_GRADE


def cgpa(marks: Mapping[str, SubjectMarks]) -> float:
    """Mean grade point over every subject in ``marks``; 0.0 when there are none."""
    if not marks:
        return 0.0
    points = [grade_point(m.internal1, m.internal2, m.external) for m in marks.values()]
    return sum(points) / len(points)


# SGPA and CGPA share the same formula over one semester's marks.
sgpa = cgpa


def format_gpa(value: float) -> str:
    return f"{round_half_up(value, 2):.2f}"


def format_percentage(value: float) -> str:
    return f"{round_half_up(value, 1):.1f}"
