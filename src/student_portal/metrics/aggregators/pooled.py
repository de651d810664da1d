from __future__ import annotations

from typing import Mapping

from ...core.enums import AttendanceAggregation
from ...students.model import SubjectAttendance
from ..calculator import attendance_percentage
from .base import AttendanceAggregator


class PooledAttendanceAggregator(AttendanceAggregator):
    """sum(present) / sum(total): every class counts once, whatever its subject."""

    name = AttendanceAggregation.POOLED.value

    def overall_percentage(self, attendance: Mapping[str, SubjectAttendance]) -> float:
        present = sum(a.present for a in attendance.values())
        total = sum(a.total for a in attendance.values())
        return attendance_percentage(present, total)
