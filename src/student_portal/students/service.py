from __future__ import annotations

import logging
import uuid
from dataclasses import asdict
from typing import Mapping, Optional, Sequence

from ..common.validators import (
    collect_errors,
    require_int_range,
    require_max_length,
    require_non_empty,
    validate_department,
    validate_email,
    validate_identifier,
    validate_name,
    validate_phone,
    validate_semester,
)
from ..core.constants import DEFAULT_SUBJECTS, MAX_EXTERNAL_MARKS, MAX_INTERNAL_MARKS
from ..core.enums import Role, SubjectKind
from ..core.exceptions import NotFoundError, ValidationError
from ..users.model import Identity
from .model import StudentProfile, StudentRecord, SubjectAttendance, SubjectMarks
from .repository import StudentRecordRepository

logger = logging.getLogger(__name__)


def default_attendance() -> dict[str, SubjectAttendance]:
    return {subject: SubjectAttendance() for subject in DEFAULT_SUBJECTS}


def default_marks() -> dict[str, SubjectMarks]:
    return {subject: SubjectMarks() for subject in DEFAULT_SUBJECTS}


def profile_from_form(form: Mapping[str, str]) -> StudentProfile:
    cleaned = collect_errors(
        name=lambda: validate_name(form.get("name")),
        reg_number=lambda: validate_identifier(form.get("reg_number")),
        department=lambda: validate_department(form.get("department")),
        semester=lambda: validate_semester(form.get("semester")),
        email=lambda: validate_email(form.get("email")),
        phone=lambda: validate_phone(form.get("phone")),
    )
    return StudentProfile(**cleaned)


def parse_revision(value) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("Invalid record revision")


class StudentService:
    """Use case: admin management of student records, attendance and marks."""

    def __init__(self, records: StudentRecordRepository):
        self._records = records

    def list_records(self, search: Optional[str] = None) -> Sequence[StudentRecord]:
        records = sorted(self._records.list_all(), key=lambda r: r.name.lower())
        query = (search or "").strip().lower()
        if not query:
            return records
        return [
            r
            for r in records
            if query in r.name.lower()
            or query in r.reg_number.lower()
            or (r.department and query in r.department.lower())
        ]

    def get_record(self, record_id: str) -> StudentRecord:
        record = self._records.get_by_id(record_id)
        if not record:
            raise NotFoundError("Student record not found")
        return record

    def record_for_identity(self, identity: Identity) -> Optional[StudentRecord]:
        return self._records.get_by_owner(identity.id)

    def create_record(self, form: Mapping[str, str]) -> StudentRecord:
        profile = profile_from_form(form)
        self._ensure_unique_reg_number(profile.reg_number)

        record = StudentRecord(
            id=uuid.uuid4().hex,
            owner_id=None,
            is_placeholder=True,
            attendance=default_attendance(),
            marks=default_marks(),
            **asdict(profile),
        )
        self._records.create(record)
        logger.info("created placeholder record %s (%s)", record.reg_number, record.id)
        return record

    def update_record(self, record_id: str, form: Mapping[str, str], *, expected_revision: Optional[int] = None) -> int:
        profile = profile_from_form(form)
        self._ensure_unique_reg_number(profile.reg_number, exclude_id=record_id)
        revision = self._records.update_profile(record_id, profile, expected_revision=expected_revision)
        logger.info("updated record %s -> revision %d", record_id, revision)
        return revision

    def delete_record(self, record_id: str) -> None:
        if not self._records.delete_by_id(record_id):
            raise NotFoundError("Student record not found")
        logger.info("deleted record %s", record_id)

    def update_attendance(
        self,
        record_id: str,
        subject: str,
        *,
        present,
        total,
        expected_revision: Optional[int] = None,
    ) -> int:
        subject = self._existing_subject(record_id, subject, SubjectKind.ATTENDANCE)
        present = require_int_range(present, "Classes attended", low=0)
        total = require_int_range(total, "Total classes", low=0)
        if present > total:
            message = "Classes attended cannot exceed total classes"
            raise ValidationError(message, {"present": message})

        return self._records.set_attendance(
            record_id,
            subject,
            SubjectAttendance(present=present, total=total),
            expected_revision=expected_revision,
        )

    def update_marks(
        self,
        record_id: str,
        subject: str,
        *,
        internal1,
        internal2,
        external,
        expected_revision: Optional[int] = None,
    ) -> int:
        subject = self._existing_subject(record_id, subject, SubjectKind.MARKS)
        cleaned = collect_errors(
            internal1=lambda: require_int_range(internal1, "Internal 1", low=0, high=MAX_INTERNAL_MARKS),
            internal2=lambda: require_int_range(internal2, "Internal 2", low=0, high=MAX_INTERNAL_MARKS),
            external=lambda: require_int_range(external, "External", low=0, high=MAX_EXTERNAL_MARKS),
        )
        return self._records.set_marks(
            record_id,
            subject,
            SubjectMarks(**cleaned),
            expected_revision=expected_revision,
        )

    def add_subject(
        self,
        record_id: str,
        subject: str,
        kind: SubjectKind,
        *,
        expected_revision: Optional[int] = None,
    ) -> int:
        subject = require_non_empty(subject or "", "Subject")
        require_max_length(subject, "Subject", 100)
        record = self.get_record(record_id)
        existing = record.attendance if kind == SubjectKind.ATTENDANCE else record.marks
        if subject.casefold() in {name.casefold() for name in existing}:
            raise ValidationError(f'Subject "{subject}" already exists')

        if kind == SubjectKind.ATTENDANCE:
            return self._records.set_attendance(
                record_id, subject, SubjectAttendance(), expected_revision=expected_revision, create_only=True
            )
        return self._records.set_marks(
            record_id, subject, SubjectMarks(), expected_revision=expected_revision, create_only=True
        )

    def link_registered_student(self, identity: Identity) -> Optional[StudentRecord]:
        """Give a newly registered student a record: claim the admin placeholder or start a fresh one."""
        if identity.role != Role.STUDENT:
            return None

        existing = self._records.get_by_owner(identity.id)
        if existing:
            return existing

        placeholder = self._records.get_by_reg_number(identity.identifier)
        if placeholder and placeholder.owner_id is None:
            self._records.claim(placeholder.id, identity.id, expected_revision=placeholder.revision)
            logger.info("student %s claimed placeholder record %s", identity.identifier, placeholder.id)
            return self._records.get_by_id(placeholder.id)
        if placeholder:
            logger.warning("record %s is owned by another account", identity.identifier)
            return None

        record = StudentRecord(
            id=uuid.uuid4().hex,
            owner_id=identity.id,
            reg_number=identity.identifier,
            name=identity.name,
            department=identity.department,
            semester=identity.semester,
            email=identity.email,
            attendance=default_attendance(),
            marks=default_marks(),
        )
        self._records.create(record)
        logger.info("created record for registered student %s", identity.identifier)
        return record

    def _existing_subject(self, record_id: str, subject: str, kind: SubjectKind) -> str:
        record = self.get_record(record_id)
        subjects = record.attendance if kind == SubjectKind.ATTENDANCE else record.marks
        if subject not in subjects:
            raise ValidationError(f'Unknown subject "{subject}"')
        return subject

    def _ensure_unique_reg_number(self, reg_number: str, *, exclude_id: Optional[str] = None) -> None:
        other = self._records.get_by_reg_number(reg_number)
        if other and other.id != exclude_id:
            message = f"A student with registration number {reg_number} already exists"
            raise ValidationError(message, {"reg_number": message})
