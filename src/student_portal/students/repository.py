from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import StudentProfile, StudentRecord, SubjectAttendance, SubjectMarks


class StudentRecordRepository(Protocol):
    """Repository interface for student records.

    Writes are keyed to one record (and one subject where relevant). When
    ``expected_revision`` is given the write only applies if the stored revision
    still matches, otherwise ``StaleRecordError`` is raised. Writes on a missing
    record raise ``NotFoundError``. Each write returns the new revision.

    Subject names match case-insensitively. With ``create_only`` a subject
    write refuses to touch an existing subject and raises ``ValidationError``.
    """

    def list_all(self) -> Sequence[StudentRecord]:
        raise NotImplementedError

    def get_by_id(self, record_id: str) -> Optional[StudentRecord]:
        raise NotImplementedError

    def get_by_owner(self, owner_id: str) -> Optional[StudentRecord]:
        raise NotImplementedError

    def get_by_reg_number(self, reg_number: str) -> Optional[StudentRecord]:
        raise NotImplementedError

    def create(self, record: StudentRecord) -> None:
        raise NotImplementedError

    def delete_by_id(self, record_id: str) -> bool:
        raise NotImplementedError

    def update_profile(self, record_id: str, profile: StudentProfile, *, expected_revision: Optional[int] = None) -> int:
        raise NotImplementedError

    def claim(self, record_id: str, owner_id: str, *, expected_revision: Optional[int] = None) -> int:
        """Attach a placeholder record to a registered account."""
        raise NotImplementedError

    def set_attendance(
        self,
        record_id: str,
        subject: str,
        value: SubjectAttendance,
        *,
        expected_revision: Optional[int] = None,
        create_only: bool = False,
    ) -> int:
        raise NotImplementedError

    def set_marks(
        self,
        record_id: str,
        subject: str,
        value: SubjectMarks,
        *,
        expected_revision: Optional[int] = None,
        create_only: bool = False,
    ) -> int:
        raise NotImplementedError
