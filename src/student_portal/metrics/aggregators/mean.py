from __future__ import annotations

from typing import Mapping

from ...core.enums import AttendanceAggregation
from ...students.model import SubjectAttendance
from ..calculator import round_half_up
from .base import AttendanceAggregator


class MeanAttendanceAggregator(AttendanceAggregator):
    """Mean of per-subject percentages; subjects with no classes held are skipped."""

    name = AttendanceAggregation.MEAN.value

    def overall_percentage(self, attendance: Mapping[str, SubjectAttendance]) -> float:
        percentages = [a.present * 100 / a.total for a in attendance.values() if a.total > 0]
        if not percentages:
            return 0.0
        return round_half_up(sum(percentages) / len(percentages), 1)
