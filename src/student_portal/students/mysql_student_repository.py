from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..core.exceptions import NotFoundError, StaleRecordError, ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import StudentProfile, StudentRecord, SubjectAttendance, SubjectMarks
from .repository import StudentRecordRepository

_RECORD_COLUMNS = "id, owner_id, reg_number, name, department, semester, email, phone, is_placeholder, revision"

_ATTENDANCE_TABLE = "subject_attendance"
_MARKS_TABLE = "subject_marks"


def _placeholders(n: int) -> str:
    return ",".join(["%s"] * n)


class MySQLStudentRecordRepository(StudentRecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -- reads ---------------------------------------------------------------

    def list_all(self) -> Sequence[StudentRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_RECORD_COLUMNS} FROM student_records ORDER BY name")
            return self._hydrate(cur, fetchall(cur))

    def get_by_id(self, record_id: str) -> Optional[StudentRecord]:
        return self._get_one("id", record_id)

    def get_by_owner(self, owner_id: str) -> Optional[StudentRecord]:
        return self._get_one("owner_id", owner_id)

    def get_by_reg_number(self, reg_number: str) -> Optional[StudentRecord]:
        return self._get_one("reg_number", reg_number)

    def _get_one(self, column: str, value: str) -> Optional[StudentRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_RECORD_COLUMNS} FROM student_records WHERE {column}=%s LIMIT 1", (value,))
            row = fetchone(cur)
            if not row:
                return None
            return self._hydrate(cur, [row])[0]

    def _hydrate(self, cur, rows: Iterable[dict]) -> list[StudentRecord]:
        rows = list(rows)
        if not rows:
            return []
        ids = [r["id"] for r in rows]

        attendance: dict[str, dict[str, SubjectAttendance]] = {i: {} for i in ids}
        cur.execute(
            f"""
            SELECT record_id, subject, present, total
            FROM {_ATTENDANCE_TABLE}
            WHERE record_id IN ({_placeholders(len(ids))})
            ORDER BY record_id, position
            """,
            tuple(ids),
        )
        for a in fetchall(cur):
            attendance[a["record_id"]][a["subject"]] = SubjectAttendance(present=int(a["present"]), total=int(a["total"]))

        marks: dict[str, dict[str, SubjectMarks]] = {i: {} for i in ids}
        cur.execute(
            f"""
            SELECT record_id, subject, internal1, internal2, external
            FROM {_MARKS_TABLE}
            WHERE record_id IN ({_placeholders(len(ids))})
            ORDER BY record_id, position
            """,
            tuple(ids),
        )
        for m in fetchall(cur):
            marks[m["record_id"]][m["subject"]] = SubjectMarks(
                internal1=int(m["internal1"]),
                internal2=int(m["internal2"]),
                external=int(m["external"]),
            )

        return [
            StudentRecord(
                id=r["id"],
                owner_id=r.get("owner_id"),
                reg_number=r["reg_number"],
                name=r["name"],
                department=r.get("department"),
                semester=int(r["semester"]) if r.get("semester") is not None else None,
                email=r.get("email"),
                phone=r.get("phone"),
                is_placeholder=bool(r.get("is_placeholder")),
                revision=int(r.get("revision") or 0),
                attendance=attendance[r["id"]],
                marks=marks[r["id"]],
            )
            for r in rows
        ]

    # -- writes --------------------------------------------------------------

    def create(self, record: StudentRecord) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO student_records(id, owner_id, reg_number, name, department, semester, email, phone,
                                            is_placeholder, revision)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,0)
                """,
                (
                    record.id,
                    record.owner_id,
                    record.reg_number,
                    record.name,
                    record.department,
                    record.semester,
                    record.email,
                    record.phone,
                    int(record.is_placeholder),
                ),
            )
            for position, (subject, a) in enumerate(record.attendance.items()):
                cur.execute(
                    f"INSERT INTO {_ATTENDANCE_TABLE}(record_id, subject, present, total, position) VALUES(%s,%s,%s,%s,%s)",
                    (record.id, subject, a.present, a.total, position),
                )
            for position, (subject, m) in enumerate(record.marks.items()):
                cur.execute(
                    f"""
                    INSERT INTO {_MARKS_TABLE}(record_id, subject, internal1, internal2, external, position)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (record.id, subject, m.internal1, m.internal2, m.external, position),
                )

    def delete_by_id(self, record_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM student_records WHERE id=%s", (record_id,))
            return cur.rowcount > 0

    def update_profile(self, record_id: str, profile: StudentProfile, *, expected_revision: Optional[int] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            revision = self._bump_revision(cur, record_id, expected_revision)
            cur.execute(
                """
                UPDATE student_records
                SET name=%s, reg_number=%s, department=%s, semester=%s, email=%s, phone=%s
                WHERE id=%s
                """,
                (
                    profile.name,
                    profile.reg_number,
                    profile.department,
                    profile.semester,
                    profile.email,
                    profile.phone,
                    record_id,
                ),
            )
            return revision

    def claim(self, record_id: str, owner_id: str, *, expected_revision: Optional[int] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            revision = self._bump_revision(cur, record_id, expected_revision)
            cur.execute(
                "UPDATE student_records SET owner_id=%s, is_placeholder=0 WHERE id=%s",
                (owner_id, record_id),
            )
            return revision

    def set_attendance(
        self,
        record_id: str,
        subject: str,
        value: SubjectAttendance,
        *,
        expected_revision: Optional[int] = None,
        create_only: bool = False,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            revision = self._bump_revision(cur, record_id, expected_revision)
            self._upsert_subject(
                cur,
                _ATTENDANCE_TABLE,
                record_id,
                subject,
                {"present": value.present, "total": value.total},
                create_only=create_only,
            )
            return revision

    def set_marks(
        self,
        record_id: str,
        subject: str,
        value: SubjectMarks,
        *,
        expected_revision: Optional[int] = None,
        create_only: bool = False,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            revision = self._bump_revision(cur, record_id, expected_revision)
            self._upsert_subject(
                cur,
                _MARKS_TABLE,
                record_id,
                subject,
                {"internal1": value.internal1, "internal2": value.internal2, "external": value.external},
                create_only=create_only,
            )
            return revision

    @staticmethod
    def _bump_revision(cur, record_id: str, expected_revision: Optional[int]) -> int:
        """Compare-and-swap on ``revision``; runs inside the caller's transaction."""
        if expected_revision is None:
            cur.execute("UPDATE student_records SET revision=revision+1 WHERE id=%s", (record_id,))
        else:
            cur.execute(
                "UPDATE student_records SET revision=revision+1 WHERE id=%s AND revision=%s",
                (record_id, int(expected_revision)),
            )

        if cur.rowcount == 0:
            cur.execute("SELECT revision FROM student_records WHERE id=%s", (record_id,))
            row = fetchone(cur)
            if not row:
                raise NotFoundError("Student record not found")
            raise StaleRecordError("This record was changed by someone else. Reload and try again.")

        cur.execute("SELECT revision FROM student_records WHERE id=%s", (record_id,))
        return int(fetchone(cur)["revision"])

    @staticmethod
    def _upsert_subject(cur, table: str, record_id: str, subject: str, values: dict, *, create_only: bool = False) -> None:
        """Write one subject row. Subject matching follows the column collation, so it ignores case."""
        cur.execute(f"SELECT 1 AS found FROM {table} WHERE record_id=%s AND subject=%s", (record_id, subject))
        if fetchone(cur):
            if create_only:
                raise ValidationError(f'Subject "{subject}" already exists')
            assignments = ", ".join(f"{col}=%s" for col in values)
            cur.execute(
                f"UPDATE {table} SET {assignments} WHERE record_id=%s AND subject=%s",
                (*values.values(), record_id, subject),
            )
            return

        cur.execute(f"SELECT COALESCE(MAX(position) + 1, 0) AS next_position FROM {table} WHERE record_id=%s", (record_id,))
        position = int(fetchone(cur)["next_position"])
        columns = ", ".join(values)
        cur.execute(
            f"INSERT INTO {table}(record_id, subject, {columns}, position) VALUES(%s,%s,{_placeholders(len(values))},%s)",
            (record_id, subject, *values.values(), position),
        )
