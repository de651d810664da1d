from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping

from ...students.model import SubjectAttendance


class AttendanceAggregator(ABC):
    """Strategy: fold per-subject attendance counters into one percentage."""

    name: str = ""

    @abstractmethod
    def overall_percentage(self, attendance: Mapping[str, SubjectAttendance]) -> float:
        raise NotImplementedError
