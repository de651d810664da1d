from __future__ import annotations

from dataclasses import dataclass

from .core.enums import AttendanceAggregation
from .database.connection import DBConfig, DatabaseConnection
from .metrics.aggregators.factory import aggregator_for
from .metrics.service import MetricsService
from .reports.service import ReportService
from .students.mysql_student_repository import MySQLStudentRecordRepository
from .students.repository import StudentRecordRepository
from .students.service import StudentService
from .users.mysql_user_repository import MySQLCredentialRepository
from .users.repository import CredentialRepository
from .users.service import CredentialAuthority


@dataclass(frozen=True)
class Container:
    users_repo: CredentialRepository
    records_repo: StudentRecordRepository

    credential_authority: CredentialAuthority
    student_service: StudentService
    metrics_service: MetricsService
    report_service: ReportService


def wire(
    users_repo: CredentialRepository,
    records_repo: StudentRecordRepository,
    *,
    attendance_aggregation: AttendanceAggregation | str = AttendanceAggregation.POOLED,
) -> Container:
    """Build the services over any repository pair (MySQL in the app, in-memory in tests)."""
    metrics_service = MetricsService(aggregator_for(attendance_aggregation))
    return Container(
        users_repo=users_repo,
        records_repo=records_repo,
        credential_authority=CredentialAuthority(users_repo),
        student_service=StudentService(records_repo),
        metrics_service=metrics_service,
        report_service=ReportService(records_repo, metrics=metrics_service),
    )


def build_container(
    *,
    db_config: dict,
    attendance_aggregation: AttendanceAggregation | str = AttendanceAggregation.POOLED,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return wire(
        MySQLCredentialRepository(conn),
        MySQLStudentRecordRepository(conn),
        attendance_aggregation=attendance_aggregation,
    )
