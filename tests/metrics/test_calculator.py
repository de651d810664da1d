from __future__ import annotations

import pytest

from student_portal.metrics.calculator import (
    attendance_percentage,
    cgpa,
    format_gpa,
    format_percentage,
    grade_point,
    is_low_attendance,
    letter_grade,
    round_half_up,
)
from student_portal.students.model import SubjectMarks


def test_attendance_percentage_no_classes_is_zero():
    assert attendance_percentage(0, 0) == 0.0


def test_attendance_percentage_rounds_to_one_decimal():
    assert attendance_percentage(28, 30) == 93.3
    assert attendance_percentage(2, 3) == 66.7
    assert attendance_percentage(30, 30) == 100.0


def test_round_half_up_rounds_halves_away_from_zero():
    assert round_half_up(0.05, 1) == 0.1
    assert round_half_up(2.675, 2) == 2.68
    assert round_half_up(0.25, 1) == 0.3


def test_grade_point_is_total_over_125_scaled_to_ten():
    assert grade_point(25, 25, 75) == 10.0
    assert grade_point(0, 0, 0) == 0.0
    # no bounds are enforced: out-of-range externals still compute
    assert grade_point(23, 25, 85) == 10.64


@pytest.mark.parametrize(
    "total, expected",
    [
        (113, "O"),
        (112, "A+"),
        (100, "A+"),
        (87.5, "A"),
        (75, "B+"),
        (62.5, "B"),
        (62, "C"),
        (0, "C"),
    ],
)
def test_letter_grade_bands(total, expected):
    assert letter_grade(total) == expected


def test_cgpa_is_mean_of_subject_grade_points():
    marks = {
        "A": SubjectMarks(internal1=25, internal2=25, external=75),
        "B": SubjectMarks(internal1=0, internal2=0, external=0),
    }
    assert cgpa(marks) == 5.0


def test_cgpa_of_no_subjects_is_zero():
    assert cgpa({}) == 0.0


def test_low_attendance_threshold_is_exclusive():
    assert is_low_attendance(74.9) is True
    assert is_low_attendance(75.0) is False


def test_display_formats():
    assert format_gpa(10.64) == "10.64"
    assert format_gpa(8.005) == "8.01"
    assert format_percentage(93.3333) == "93.3"
    assert format_percentage(0) == "0.0"
