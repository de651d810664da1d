from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from student_portal.container import wire
from student_portal.core.enums import Role
from student_portal.core.exceptions import NotFoundError, StaleRecordError, ValidationError
from student_portal.main import create_app
from student_portal.students.model import StudentRecord, SubjectAttendance, SubjectMarks
from student_portal.users.model import Credential, Identity
from student_portal.users.service import CredentialAuthority


class InMemoryCredentials:
    def __init__(self):
        self._by_id: dict[str, Credential] = {}
        self.writes = 0

    def get_by_id(self, user_id):
        return self._by_id.get(user_id)

    def get_by_identifier(self, identifier):
        for c in self._by_id.values():
            if c.identity.identifier == identifier:
                return c
        return None

    def create(self, credential):
        self.writes += 1
        self._by_id[credential.identity.id] = credential

    # test helpers
    def all(self) -> list[Credential]:
        return list(self._by_id.values())

    def delete(self, user_id):
        self._by_id.pop(user_id, None)

    def rename(self, user_id, name):
        c = self._by_id[user_id]
        self._by_id[user_id] = replace(c, identity=replace(c.identity, name=name))


def _subject_key(subjects, subject, create_only):
    """Match subject names case-insensitively, like the MySQL collation."""
    for name in subjects:
        if name.casefold() == subject.casefold():
            if create_only:
                raise ValidationError(f'Subject "{subject}" already exists')
            return name
    return subject


class InMemoryStudentRecords:
    def __init__(self):
        self._records: dict[str, StudentRecord] = {}

    def list_all(self):
        return list(self._records.values())

    def get_by_id(self, record_id):
        return self._records.get(record_id)

    def get_by_owner(self, owner_id):
        return next((r for r in self._records.values() if r.owner_id == owner_id), None)

    def get_by_reg_number(self, reg_number):
        return next((r for r in self._records.values() if r.reg_number == reg_number), None)

    def create(self, record):
        self._records[record.id] = replace(record, revision=0)

    def delete_by_id(self, record_id):
        return self._records.pop(record_id, None) is not None

    def update_profile(self, record_id, profile, *, expected_revision=None):
        record = self._check(record_id, expected_revision)
        return self._put(
            replace(
                record,
                name=profile.name,
                reg_number=profile.reg_number,
                department=profile.department,
                semester=profile.semester,
                email=profile.email,
                phone=profile.phone,
            )
        )

    def claim(self, record_id, owner_id, *, expected_revision=None):
        record = self._check(record_id, expected_revision)
        return self._put(replace(record, owner_id=owner_id, is_placeholder=False))

    def set_attendance(self, record_id, subject, value, *, expected_revision=None, create_only=False):
        record = self._check(record_id, expected_revision)
        key = _subject_key(record.attendance, subject, create_only)
        return self._put(replace(record, attendance={**record.attendance, key: value}))

    def set_marks(self, record_id, subject, value, *, expected_revision=None, create_only=False):
        record = self._check(record_id, expected_revision)
        key = _subject_key(record.marks, subject, create_only)
        return self._put(replace(record, marks={**record.marks, key: value}))

    def _check(self, record_id, expected_revision) -> StudentRecord:
        record = self._records.get(record_id)
        if record is None:
            raise NotFoundError("Student record not found")
        if expected_revision is not None and record.revision != int(expected_revision):
            raise StaleRecordError("This record was changed by someone else. Reload and try again.")
        return record

    def _put(self, record: StudentRecord) -> int:
        bumped = replace(record, revision=record.revision + 1)
        self._records[bumped.id] = bumped
        return bumped.revision


class MemorySessionStore:
    def __init__(self, data: Optional[dict] = None):
        self.data = dict(data) if data else None
        self.remembered = False

    def load(self):
        return dict(self.data) if self.data else None

    def save(self, data, *, remember=False):
        self.data = dict(data)
        self.remembered = remember

    def clear(self):
        self.data = None
        self.remembered = False


@pytest.fixture
def fixed_now():
    # A Wednesday.
    return datetime(2026, 1, 28, 9, 0, 0)


@pytest.fixture
def credentials_repo():
    return InMemoryCredentials()


@pytest.fixture
def records_repo():
    return InMemoryStudentRecords()


@pytest.fixture
def session_store():
    return MemorySessionStore()


@pytest.fixture
def authority(credentials_repo):
    return CredentialAuthority(credentials_repo)


@pytest.fixture
def add_user(credentials_repo):
    """Store a credential directly, bypassing registration."""

    def _add(identifier, password, *, role=Role.STUDENT, name="Test User", **profile):
        identity = Identity(id=f"id-{identifier.lower()}", name=name, identifier=identifier, role=role, **profile)
        credentials_repo.create(Credential(identity=identity, password_hash=generate_password_hash(password)))
        return identity

    return _add


@pytest.fixture
def admin(add_user):
    return add_user("ADMIN001", "admin123", role=Role.ADMIN, name="Admin User")


@pytest.fixture
def student(add_user):
    return add_user("AP21110010001", "student123", name="Rajesh Kumar", department="Computer Science", semester=6)


@pytest.fixture
def student_record(records_repo, student):
    record = StudentRecord(
        id="rec-1",
        reg_number=student.identifier,
        name=student.name,
        owner_id=student.id,
        department="Computer Science",
        semester=6,
        attendance={
            "Data Structures": SubjectAttendance(present=28, total=30),
            "Operating Systems": SubjectAttendance(present=20, total=30),
        },
        marks={
            "Data Structures": SubjectMarks(internal1=23, internal2=22, external=68),
            "Operating Systems": SubjectMarks(internal1=20, internal2=21, external=62),
        },
    )
    records_repo.create(record)
    return records_repo.get_by_id(record.id)


@pytest.fixture
def container(credentials_repo, records_repo):
    return wire(credentials_repo, records_repo)


@pytest.fixture
def app(container):
    app = create_app(container, settings_module="config.testing")
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(identifier, password):
        return client.post("/login", data={"regNumber": identifier, "password": password})

    return _login
