from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Credential, Identity
from .repository import CredentialRepository

_COLUMNS = "id, name, identifier, password_hash, role, email, department, semester"


def _to_identity(row: dict) -> Identity:
    semester = row.get("semester")
    return Identity(
        id=row["id"],
        name=row["name"],
        identifier=row["identifier"],
        role=Role(row["role"]),
        email=row.get("email"),
        department=row.get("department"),
        semester=int(semester) if semester is not None else None,
    )


def _to_credential(row: dict) -> Credential:
    return Credential(identity=_to_identity(row), password_hash=row["password_hash"])


class MySQLCredentialRepository(CredentialRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: str) -> Optional[Credential]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE id=%s", (user_id,))
            row = fetchone(cur)
            return _to_credential(row) if row else None

    def get_by_identifier(self, identifier: str) -> Optional[Credential]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE identifier=%s", (identifier,))
            row = fetchone(cur)
            return _to_credential(row) if row else None

    def create(self, credential: Credential) -> None:
        identity = credential.identity
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(id, name, identifier, password_hash, role, email, department, semester)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    identity.id,
                    identity.name,
                    identity.identifier,
                    credential.password_hash,
                    identity.role.value,
                    identity.email,
                    identity.department,
                    identity.semester,
                ),
            )

