from __future__ import annotations

import io
import logging
from typing import Optional

from flask import Flask, flash, jsonify, redirect, render_template, request, send_file, url_for

from ..container import Container
from ..core.enums import SubjectKind
from ..core.exceptions import BackendError, NotFoundError, StaleRecordError, ValidationError
from ..reports.service import XLSX_MIMETYPE, report_to_csv, report_to_excel
from ..sessions.guards import admin_required, current_identity, student_required
from ..timetable.schedule import WEEKLY_TIMETABLE, classes_for_day
from .model import StudentRecord
from .service import parse_revision

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    students = container.student_service
    metrics = container.metrics_service

    def _flash_failure(action: str, e: Exception) -> None:
        if isinstance(e, StaleRecordError):
            logger.warning("stale write rejected during %s: %s", action, e)
            flash(str(e), "warning")
        elif isinstance(e, (ValidationError, NotFoundError)):
            flash(str(e), "danger")
        elif isinstance(e, BackendError):
            logger.error("backend failure during %s: %s", action, e)
            flash(f"Failed to {action}: {e}", "danger")
        else:
            logger.exception("unexpected error during %s", action)
            if bool(app.config.get("DEBUG", False)):
                flash(f"System error during {action}: {e}", "danger")
            else:
                flash(f"Failed to {action}. Please try again.", "danger")

    def _selected(record_id: Optional[str]) -> Optional[StudentRecord]:
        if not record_id:
            return None
        try:
            return students.get_record(record_id)
        except NotFoundError as e:
            flash(str(e), "warning")
            return None

    def _my_record() -> Optional[StudentRecord]:
        return students.record_for_identity(current_identity())

    # -- admin ---------------------------------------------------------------

    @app.route("/admin", endpoint="admin_dashboard")
    @admin_required
    def admin_dashboard():
        records = students.list_records()
        return render_template(
            "admin/dashboard.html",
            overview=metrics.admin_overview(records),
            recent=records[:5],
            active_page="admin_dashboard",
        )

    @app.route("/admin/students", endpoint="admin_students")
    @admin_required
    def admin_students():
        search = request.args.get("q", "")
        records = students.list_records(search)
        return render_template(
            "admin/students.html",
            records=records,
            search=search,
            active_page="admin_students",
        )

    @app.route("/admin/students/new", methods=["GET", "POST"], endpoint="admin_student_new")
    @admin_required
    def admin_student_new():
        errors: dict[str, str] = {}
        if request.method == "POST":
            try:
                students.create_record(request.form)
                flash("Student record created with default subjects!", "success")
                return redirect(url_for("admin_students"))
            except ValidationError as e:
                errors = e.errors
                flash(str(e), "danger")
            except Exception as e:
                _flash_failure("save", e)

        return render_template(
            "admin/student_form.html",
            record=None,
            form=request.form,
            errors=errors,
            active_page="admin_students",
        )

    @app.route("/admin/students/<record_id>/edit", methods=["GET", "POST"], endpoint="admin_student_edit")
    @admin_required
    def admin_student_edit(record_id: str):
        try:
            record = students.get_record(record_id)
        except NotFoundError as e:
            flash(str(e), "warning")
            return redirect(url_for("admin_students"))

        errors: dict[str, str] = {}
        form = request.form
        if request.method == "POST":
            try:
                students.update_record(
                    record_id,
                    request.form,
                    expected_revision=parse_revision(request.form.get("revision")),
                )
                flash("Student updated successfully!", "success")
                return redirect(url_for("admin_students"))
            except ValidationError as e:
                errors = e.errors
                flash(str(e), "danger")
            except Exception as e:
                _flash_failure("save", e)
                if isinstance(e, StaleRecordError):
                    return redirect(url_for("admin_student_edit", record_id=record_id))
        else:
            form = {
                "name": record.name,
                "reg_number": record.reg_number,
                "department": record.department or "",
                "semester": record.semester if record.semester is not None else "",
                "email": record.email or "",
                "phone": record.phone or "",
            }

        return render_template(
            "admin/student_form.html",
            record=record,
            form=form,
            errors=errors,
            active_page="admin_students",
        )

    @app.route("/admin/students/<record_id>/delete", methods=["POST"], endpoint="admin_student_delete")
    @admin_required
    def admin_student_delete(record_id: str):
        try:
            students.delete_record(record_id)
            flash("Student deleted successfully!", "success")
        except Exception as e:
            _flash_failure("delete", e)
        return redirect(url_for("admin_students"))

    def _subject_page(kind: SubjectKind):
        records = students.list_records()
        record = _selected(request.args.get("student"))
        summary = metrics.student_summary(record) if record else None
        return render_template(
            f"admin/{kind.value}.html",
            records=records,
            record=record,
            summary=summary,
            active_page=f"admin_{kind.value}",
        )

    def _add_subject(record_id: str, kind: SubjectKind):
        try:
            students.add_subject(
                record_id,
                request.form.get("subject", ""),
                kind,
                expected_revision=parse_revision(request.form.get("revision")),
            )
            flash("Subject added!", "success")
        except Exception as e:
            _flash_failure("add subject", e)
        return redirect(url_for(f"admin_{kind.value}", student=record_id))

    @app.route("/admin/attendance", endpoint="admin_attendance")
    @admin_required
    def admin_attendance():
        return _subject_page(SubjectKind.ATTENDANCE)

    @app.route("/admin/attendance/<record_id>", methods=["POST"], endpoint="admin_attendance_update")
    @admin_required
    def admin_attendance_update(record_id: str):
        try:
            students.update_attendance(
                record_id,
                request.form.get("subject", ""),
                present=request.form.get("present"),
                total=request.form.get("total"),
                expected_revision=parse_revision(request.form.get("revision")),
            )
            flash("Attendance updated!", "success")
        except Exception as e:
            _flash_failure("update attendance", e)
        return redirect(url_for("admin_attendance", student=record_id))

    @app.route("/admin/attendance/<record_id>/subjects", methods=["POST"], endpoint="admin_attendance_subject")
    @admin_required
    def admin_attendance_subject(record_id: str):
        return _add_subject(record_id, SubjectKind.ATTENDANCE)

    @app.route("/admin/marks", endpoint="admin_marks")
    @admin_required
    def admin_marks():
        return _subject_page(SubjectKind.MARKS)

    @app.route("/admin/marks/<record_id>", methods=["POST"], endpoint="admin_marks_update")
    @admin_required
    def admin_marks_update(record_id: str):
        try:
            students.update_marks(
                record_id,
                request.form.get("subject", ""),
                internal1=request.form.get("internal1"),
                internal2=request.form.get("internal2"),
                external=request.form.get("external"),
                expected_revision=parse_revision(request.form.get("revision")),
            )
            flash("Marks updated!", "success")
        except Exception as e:
            _flash_failure("update marks", e)
        return redirect(url_for("admin_marks", student=record_id))

    @app.route("/admin/marks/<record_id>/subjects", methods=["POST"], endpoint="admin_marks_subject")
    @admin_required
    def admin_marks_subject(record_id: str):
        return _add_subject(record_id, SubjectKind.MARKS)

    @app.route("/admin/reports/marks.csv", endpoint="admin_report_csv")
    @admin_required
    def admin_report_csv():
        data = container.report_service.build_marks_report()
        return app.response_class(
            report_to_csv(data),
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=marks_report.csv"},
        )

    @app.route("/admin/reports/marks.xlsx", endpoint="admin_report_excel")
    @admin_required
    def admin_report_excel():
        data = container.report_service.build_marks_report()
        return send_file(
            io.BytesIO(report_to_excel(data)),
            download_name="marks_report.xlsx",
            as_attachment=True,
            mimetype=XLSX_MIMETYPE,
        )

    # -- student -------------------------------------------------------------

    @app.route("/student", endpoint="student_dashboard")
    @student_required
    def student_dashboard():
        record = _my_record()
        return render_template(
            "student/dashboard.html",
            record=record,
            summary=metrics.student_summary(record) if record else None,
            today_classes=classes_for_day(),
            active_page="student_dashboard",
        )

    @app.route("/student/attendance", endpoint="student_attendance")
    @student_required
    def student_attendance():
        record = _my_record()
        return render_template(
            "student/attendance.html",
            record=record,
            summary=metrics.student_summary(record) if record else None,
            active_page="student_attendance",
        )

    @app.route("/student/marks", endpoint="student_marks")
    @student_required
    def student_marks():
        record = _my_record()
        return render_template(
            "student/marks.html",
            record=record,
            summary=metrics.student_summary(record) if record else None,
            active_page="student_marks",
        )

    @app.route("/student/profile", endpoint="student_profile")
    @student_required
    def student_profile():
        record = _my_record()
        return render_template(
            "student/profile.html",
            identity=current_identity(),
            record=record,
            summary=metrics.student_summary(record) if record else None,
            active_page="student_profile",
        )

    @app.route("/student/timetable", endpoint="student_timetable")
    @student_required
    def student_timetable():
        return render_template(
            "student/timetable.html",
            timetable=WEEKLY_TIMETABLE,
            active_page="student_timetable",
        )

    @app.route("/api/me/summary", endpoint="api_me_summary")
    def api_me_summary():
        identity = current_identity()
        if identity is None:
            return jsonify({"success": False, "message": "Not authenticated"}), 401
        record = students.record_for_identity(identity)
        return jsonify(
            {
                "identity": identity.to_dict(),
                "aggregation": metrics.aggregation,
                "summary": metrics.student_summary(record).to_dict() if record else None,
            }
        )
