from __future__ import annotations

import pytest

from student_portal.core.constants import SESSION_USER_KEY
from student_portal.core.exceptions import BackendError
from student_portal.students.model import StudentRecord


def _location(resp):
    return resp.headers["Location"]


def test_root_redirects_anonymous_to_login(client):
    resp = client.get("/")
    assert resp.status_code == 302
    assert _location(resp).endswith("/login")


def test_login_page_renders(client):
    resp = client.get("/login")
    assert resp.status_code == 200
    assert b"Registration Number" in resp.data


def test_admin_login_lands_on_admin_dashboard(client, login, admin):
    resp = login("admin001", "admin123")
    assert resp.status_code == 302
    assert _location(resp).endswith("/admin")

    page = client.get("/admin")
    assert page.status_code == 200
    assert b"Admin Dashboard" in page.data


def test_student_login_lands_on_student_dashboard(client, login, student_record):
    resp = login("AP21110010001", "student123")
    assert _location(resp).endswith("/student")

    page = client.get("/student")
    assert page.status_code == 200
    assert b"Welcome back, Rajesh Kumar!" in page.data
    assert b"80.0%" in page.data


def test_failed_login_shows_message_and_stays_anonymous(client, login, student):
    resp = login("AP21110010001", "nope")
    assert resp.status_code == 200
    assert b"Invalid registration number or password" in resp.data

    with client.session_transaction() as sess:
        assert SESSION_USER_KEY not in sess


@pytest.mark.parametrize("path", ["/admin", "/admin/students", "/student", "/student/marks"])
def test_protected_pages_require_login(client, path):
    resp = client.get(path)
    assert resp.status_code == 302
    assert _location(resp).endswith("/login")


def test_wrong_role_is_sent_to_own_home(client, login, admin, student_record):
    login("AP21110010001", "student123")
    resp = client.get("/admin/students")
    assert _location(resp).endswith("/student")

    client.post("/logout")
    login("ADMIN001", "admin123")
    resp = client.get("/student/attendance")
    assert _location(resp).endswith("/admin")


def test_logout_clears_session(client, login, student):
    login("AP21110010001", "student123")
    resp = client.post("/logout")
    assert _location(resp).endswith("/login")

    with client.session_transaction() as sess:
        assert SESSION_USER_KEY not in sess
    assert _location(client.get("/student")).endswith("/login")


def test_session_for_deleted_account_is_dropped(client, login, student, credentials_repo):
    login("AP21110010001", "student123")
    credentials_repo.delete(student.id)

    assert _location(client.get("/student")).endswith("/login")
    with client.session_transaction() as sess:
        assert SESSION_USER_KEY not in sess


def test_register_creates_account_and_record(client, login, container):
    resp = client.post(
        "/register",
        data={
            "name": "Anita Rao",
            "regNumber": "ap21110010077",
            "department": "Civil",
            "semester": "4",
            "password": "secret123",
            "confirmPassword": "secret123",
        },
    )
    assert _location(resp).endswith("/login")

    login("AP21110010077", "secret123")
    page = client.get("/student/profile")
    assert page.status_code == 200
    assert b"AP21110010077" in page.data
    assert container.records_repo.get_by_reg_number("AP21110010077") is not None


def test_register_duplicate_is_rejected(client, student, credentials_repo):
    count = len(credentials_repo.all())
    resp = client.post(
        "/register",
        data={
            "name": "Impostor",
            "regNumber": "AP21110010001",
            "password": "secret123",
            "confirmPassword": "secret123",
        },
    )
    assert resp.status_code == 200
    assert b"already exists" in resp.data
    assert len(credentials_repo.all()) == count


def test_register_shows_field_errors(client):
    resp = client.post("/register", data={"name": "A", "regNumber": "x", "password": "1", "confirmPassword": "2"})
    assert resp.status_code == 200
    assert b"Passwords do not match" in resp.data


def test_admin_creates_and_edits_student(client, login, admin, container):
    login("ADMIN001", "admin123")
    resp = client.post(
        "/admin/students/new",
        data={"name": "Priya Sharma", "reg_number": "ap21110010002", "department": "Electronics", "semester": "6"},
    )
    assert _location(resp).endswith("/admin/students")

    record = container.records_repo.get_by_reg_number("AP21110010002")
    assert record.is_placeholder

    resp = client.post(
        f"/admin/students/{record.id}/edit",
        data={"name": "Priya S", "reg_number": "AP21110010002", "revision": str(record.revision)},
    )
    assert _location(resp).endswith("/admin/students")
    assert container.records_repo.get_by_id(record.id).name == "Priya S"

    listing = client.get("/admin/students?q=priya")
    assert b"Priya S" in listing.data


def test_admin_stale_edit_is_refused(client, login, admin, student_record, container):
    login("ADMIN001", "admin123")
    container.student_service.update_attendance(student_record.id, "Data Structures", present=29, total=30)

    resp = client.post(
        f"/admin/attendance/{student_record.id}",
        data={"subject": "Data Structures", "present": "1", "total": "30", "revision": str(student_record.revision)},
        follow_redirects=True,
    )
    assert b"changed by someone else" in resp.data
    assert container.records_repo.get_by_id(student_record.id).attendance["Data Structures"].present == 29


def test_admin_updates_marks_and_adds_subject(client, login, admin, student_record, container):
    login("ADMIN001", "admin123")
    client.post(
        f"/admin/marks/{student_record.id}",
        data={"subject": "Operating Systems", "internal1": "25", "internal2": "25", "external": "75"},
    )
    client.post(f"/admin/marks/{student_record.id}/subjects", data={"subject": "Compiler Design"})

    record = container.records_repo.get_by_id(student_record.id)
    assert record.marks["Operating Systems"].total == 125
    assert "Compiler Design" in record.marks

    page = client.get(f"/admin/marks?student={student_record.id}")
    assert b"Compiler Design" in page.data


def test_admin_marks_out_of_range_flashes_error(client, login, admin, student_record):
    login("ADMIN001", "admin123")
    resp = client.post(
        f"/admin/marks/{student_record.id}",
        data={"subject": "Data Structures", "internal1": "30", "internal2": "0", "external": "0"},
        follow_redirects=True,
    )
    assert b"Internal 1 must be between 0 and 25" in resp.data


def test_admin_deletes_student(client, login, admin, student_record, container):
    login("ADMIN001", "admin123")
    client.post(f"/admin/students/{student_record.id}/delete")
    assert container.records_repo.get_by_id(student_record.id) is None


def test_admin_report_exports(client, login, admin, student_record):
    login("ADMIN001", "admin123")

    csv_resp = client.get("/admin/reports/marks.csv")
    assert csv_resp.mimetype == "text/csv"
    assert csv_resp.data.startswith(b"\xef\xbb\xbf")
    assert b"Data Structures" in csv_resp.data

    xlsx_resp = client.get("/admin/reports/marks.xlsx")
    assert xlsx_resp.status_code == 200
    assert xlsx_resp.data[:2] == b"PK"


def test_student_pages_render(client, login, student_record):
    login("AP21110010001", "student123")
    for path, text in [
        ("/student/attendance", b"93.3%"),
        ("/student/marks", b"8.64"),
        ("/student/profile", b"Computer Science"),
        ("/student/timetable", b"Wednesday"),
    ]:
        resp = client.get(path)
        assert resp.status_code == 200, path
        assert text in resp.data, path


def test_student_without_record_sees_notice(client, login, student, records_repo):
    records_repo.create(StudentRecord(id="rec-x", reg_number=student.identifier, name="Someone Else", owner_id="id-other"))

    login("AP21110010001", "student123")
    resp = client.get("/student")
    assert b"No academic record" in resp.data


def test_failed_record_link_is_repaired_on_login(client, login, container, records_repo, monkeypatch):
    create = records_repo.create
    calls = []

    def flaky_create(record):
        calls.append(record.reg_number)
        if len(calls) == 1:
            raise BackendError("Lost connection to MySQL server")
        create(record)

    monkeypatch.setattr(records_repo, "create", flaky_create)
    resp = client.post(
        "/register",
        data={
            "name": "Anita Rao",
            "regNumber": "AP21110010077",
            "password": "secret123",
            "confirmPassword": "secret123",
        },
    )
    assert _location(resp).endswith("/login")
    assert container.records_repo.get_by_reg_number("AP21110010077") is None

    login("AP21110010077", "secret123")
    record = container.records_repo.get_by_reg_number("AP21110010077")
    assert record is not None
    assert b"No academic record" not in client.get("/student").data


def test_summary_api(client, login, student_record):
    assert client.get("/api/me/summary").status_code == 401

    login("AP21110010001", "student123")
    data = client.get("/api/me/summary").get_json()

    assert data["identity"]["identifier"] == "AP21110010001"
    assert data["identity"]["role"] == "student"
    assert data["aggregation"] == "pooled"
    assert data["summary"]["overall_attendance"] == "80.0"
    assert data["summary"]["sgpa"] == "8.64"
