from __future__ import annotations

import pytest

from student_portal.metrics.aggregators.mean import MeanAttendanceAggregator
from student_portal.metrics.service import MetricsService
from student_portal.students.model import StudentRecord, SubjectAttendance, SubjectMarks


def _record(rid, attendance=None, marks=None):
    return StudentRecord(id=rid, reg_number=rid.upper(), name=rid, attendance=attendance or {}, marks=marks or {})


def test_student_summary_rows_and_totals(student_record):
    summary = MetricsService().student_summary(student_record)

    assert summary.total_present == 48
    assert summary.total_classes == 60
    assert summary.overall_attendance == 80.0
    assert summary.subject_count == 2
    assert [r.percentage for r in summary.attendance_rows] == [93.3, 66.7]
    assert summary.low_attendance_subjects == ["Operating Systems"]
    assert summary.marks_rows[0].total == 113
    assert summary.marks_rows[0].grade == "O"
    assert summary.sgpa == pytest.approx(8.64)


def test_subject_without_classes_is_not_flagged_low():
    record = _record("a", attendance={"New": SubjectAttendance()})
    summary = MetricsService().student_summary(record)
    assert summary.low_attendance_subjects == []


def test_summary_to_dict_uses_display_formats(student_record):
    data = MetricsService().student_summary(student_record).to_dict()
    assert data["overall_attendance"] == "80.0"
    assert data["sgpa"] == "8.64"
    assert data["low_attendance_subjects"] == ["Operating Systems"]


def test_overall_attendance_follows_injected_strategy():
    record = _record("a", attendance={"A": SubjectAttendance(28, 30), "B": SubjectAttendance(0, 10)})
    assert MetricsService().overall_attendance(record) == 70.0
    assert MetricsService(MeanAttendanceAggregator()).overall_attendance(record) == 46.7
    assert MetricsService(MeanAttendanceAggregator()).aggregation == "mean"


def test_admin_overview_averages_only_students_with_data():
    records = [
        _record("a", attendance={"X": SubjectAttendance(9, 10)}, marks={"X": SubjectMarks(25, 25, 75)}),
        _record("b", attendance={"Y": SubjectAttendance(5, 10)}, marks={"Y": SubjectMarks(0, 0, 0)}),
        _record("c", attendance={"X": SubjectAttendance()}),
    ]
    overview = MetricsService().admin_overview(records)

    assert overview.total_students == 3
    assert overview.average_attendance == 70.0
    assert overview.average_cgpa == 5.0
    assert overview.total_subjects == 2


def test_admin_overview_of_no_students():
    overview = MetricsService().admin_overview([])
    assert overview.total_students == 0
    assert overview.average_attendance == 0.0
    assert overview.average_cgpa == 0.0
