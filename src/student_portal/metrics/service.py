from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..students.model import StudentRecord
from .aggregators.base import AttendanceAggregator
from .aggregators.pooled import PooledAttendanceAggregator
from .calculator import (
    attendance_percentage,
    cgpa,
    format_gpa,
    format_percentage,
    grade_point,
    is_low_attendance,
    letter_grade,
    sgpa,
)


@dataclass(frozen=True)
class AttendanceRow:
    subject: str
    present: int
    total: int
    percentage: float
    is_low: bool


@dataclass(frozen=True)
class MarksRow:
    subject: str
    internal1: int
    internal2: int
    external: int
    total: int
    grade_point: float
    grade: str


@dataclass(frozen=True)
class StudentSummary:
    overall_attendance: float
    total_present: int
    total_classes: int
    subject_count: int
    sgpa: float
    attendance_rows: list[AttendanceRow] = field(default_factory=list)
    marks_rows: list[MarksRow] = field(default_factory=list)

    @property
    def low_attendance_subjects(self) -> list[str]:
        return [r.subject for r in self.attendance_rows if r.is_low]

    def to_dict(self) -> dict:
        return {
            "overall_attendance": format_percentage(self.overall_attendance),
            "total_present": self.total_present,
            "total_classes": self.total_classes,
            "subject_count": self.subject_count,
            "sgpa": format_gpa(self.sgpa),
            "low_attendance_subjects": self.low_attendance_subjects,
        }


@dataclass(frozen=True)
class AdminOverview:
    total_students: int
    average_attendance: float
    total_subjects: int
    average_cgpa: float


class MetricsService:
    """Builds the figures shown on dashboards and summaries.

    Every overall attendance figure goes through the injected aggregator so
    the student pages, the admin dashboard and reports agree.
    """

    def __init__(self, aggregator: Optional[AttendanceAggregator] = None):
        self._aggregator = aggregator or PooledAttendanceAggregator()

    @property
    def aggregation(self) -> str:
        return self._aggregator.name

    def overall_attendance(self, record: StudentRecord) -> float:
        return self._aggregator.overall_percentage(record.attendance)

    def student_summary(self, record: StudentRecord) -> StudentSummary:
        attendance_rows = []
        for subject, a in record.attendance.items():
            pct = attendance_percentage(a.present, a.total)
            attendance_rows.append(
                AttendanceRow(
                    subject=subject,
                    present=a.present,
                    total=a.total,
                    percentage=pct,
                    is_low=a.total > 0 and is_low_attendance(pct),
                )
            )

        marks_rows = [
            MarksRow(
                subject=subject,
                internal1=m.internal1,
                internal2=m.internal2,
                external=m.external,
                total=m.total,
                grade_point=grade_point(m.internal1, m.internal2, m.external),
                grade=letter_grade(m.total),
            )
            for subject, m in record.marks.items()
        ]

        return StudentSummary(
            overall_attendance=self.overall_attendance(record),
            total_present=sum(a.present for a in record.attendance.values()),
            total_classes=sum(a.total for a in record.attendance.values()),
            subject_count=len(set(record.attendance) | set(record.marks)),
            sgpa=sgpa(record.marks),
            attendance_rows=attendance_rows,
            marks_rows=marks_rows,
        )

    def admin_overview(self, records: Sequence[StudentRecord]) -> AdminOverview:
        attended = [self.overall_attendance(r) for r in records if any(a.total for a in r.attendance.values())]
        graded = [cgpa(r.marks) for r in records if r.marks]
        subjects: set[str] = set()
        for r in records:
            subjects.update(r.attendance)
            subjects.update(r.marks)

        return AdminOverview(
            total_students=len(records),
            average_attendance=sum(attended) / len(attended) if attended else 0.0,
            total_subjects=len(subjects),
            average_cgpa=sum(graded) / len(graded) if graded else 0.0,
        )
