from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from ..metrics.calculator import format_gpa, format_percentage
from ..metrics.service import MetricsService
from ..students.repository import StudentRecordRepository

ROW_FIELDS = [
    "reg_number",
    "name",
    "department",
    "subject",
    "internal1",
    "internal2",
    "external",
    "total",
    "grade_point",
    "grade",
]

SUMMARY_FIELDS = [
    "reg_number",
    "name",
    "department",
    "semester",
    "attendance",
    "cgpa",
    "low_attendance_subjects",
]

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


class ReportService:
    def __init__(self, records: StudentRecordRepository, *, metrics: Optional[MetricsService] = None):
        self._records = records
        self._metrics = metrics or MetricsService()

    def build_marks_report(self) -> ReportData:
        """One row per student per subject, plus one summary line per student."""
        out_rows: list[dict] = []
        summary: list[dict] = []

        for record in sorted(self._records.list_all(), key=lambda r: r.reg_number):
            s = self._metrics.student_summary(record)

            for m in s.marks_rows:
                out_rows.append(
                    {
                        "reg_number": record.reg_number,
                        "name": record.name,
                        "department": record.department or "-",
                        "subject": m.subject,
                        "internal1": m.internal1,
                        "internal2": m.internal2,
                        "external": m.external,
                        "total": m.total,
                        "grade_point": format_gpa(m.grade_point),
                        "grade": m.grade,
                    }
                )

            summary.append(
                {
                    "reg_number": record.reg_number,
                    "name": record.name,
                    "department": record.department or "-",
                    "semester": record.semester if record.semester is not None else "-",
                    "attendance": format_percentage(s.overall_attendance),
                    "cgpa": format_gpa(s.sgpa),
                    "low_attendance_subjects": ", ".join(s.low_attendance_subjects),
                }
            )

        return ReportData(rows=out_rows, summary=summary)


def report_to_csv(data: ReportData) -> bytes:
    """Per-subject rows as CSV, BOM-prefixed so Excel picks up UTF-8."""
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=ROW_FIELDS)
    writer.writeheader()
    for row in data.rows:
        writer.writerow(row)
    return out.getvalue().encode("utf-8-sig")


def report_to_excel(data: ReportData) -> bytes:
    """Workbook with a ``Marks`` sheet and a ``Summary`` sheet, built in memory."""
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        pd.DataFrame(data.rows, columns=ROW_FIELDS).to_excel(writer, index=False, sheet_name="Marks")
        pd.DataFrame(data.summary, columns=SUMMARY_FIELDS).to_excel(writer, index=False, sheet_name="Summary")
    return output.getvalue()
