from __future__ import annotations

import logging
import re
import uuid
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from ..core.enums import Role
from .connection import DatabaseConnection, DBConfig
from .mysql_base import db_cursor, fetchone

logger = logging.getLogger(__name__)

DEMO_USERS = (
    # name, identifier, password, role, email, department, semester
    ("Admin User", "ADMIN001", "admin123", Role.ADMIN, "admin@srmap.edu.in", None, None),
    ("Rajesh Kumar", "AP21110010001", "student123", Role.STUDENT, "rajesh@srmap.edu.in", "Computer Science", 6),
    ("Priya Sharma", "AP21110010002", "student123", Role.STUDENT, "priya@srmap.edu.in", "Electronics", 6),
)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    quote: str | None = None
    escape = False

    for ch in sql:
        buf.append(ch)
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_sql_file(conn_factory: DatabaseConnection, path: str | Path) -> int:
    sql = _strip_comments(_strip_create_db_and_use(Path(path).read_text(encoding="utf-8")))
    count = 0
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
    return count


def ensure_database_exists(db_config: dict) -> None:
    config = DBConfig.from_dict(db_config)
    conn = DatabaseConnection(config).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_sql_file(DatabaseConnection(DBConfig.from_dict(db_config)), schema_path)
    logger.info("schema applied (%d statements)", count)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _run_sql_file(DatabaseConnection(DBConfig.from_dict(db_config)), seed_path)
    logger.info("seed applied (%d statements)", count)


def ensure_demo_users(db_config: dict) -> None:
    """Upsert the demo accounts and attach the students to their seeded records."""
    conn_factory = DatabaseConnection(DBConfig.from_dict(db_config))
    with db_cursor(conn_factory) as (_, cur):
        for name, identifier, password, role, email, department, semester in DEMO_USERS:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT id FROM users WHERE identifier=%s", (identifier,))
            existing = fetchone(cur)
            if existing:
                user_id = existing["id"]
                cur.execute(
                    """
                    UPDATE users
                    SET name=%s, password_hash=%s, role=%s, email=%s, department=%s, semester=%s
                    WHERE id=%s
                    """,
                    (name, password_hash, role.value, email, department, semester, user_id),
                )
            else:
                user_id = uuid.uuid4().hex
                cur.execute(
                    """
                    INSERT INTO users (id, name, identifier, password_hash, role, email, department, semester)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    (user_id, name, identifier, password_hash, role.value, email, department, semester),
                )

            if role == Role.STUDENT:
                cur.execute(
                    """
                    UPDATE student_records
                    SET owner_id=%s, is_placeholder=0, revision=revision+1
                    WHERE reg_number=%s AND (owner_id IS NULL OR owner_id<>%s)
                    """,
                    (user_id, identifier, user_id),
                )
    logger.info("demo users ready (%d accounts)", len(DEMO_USERS))


def list_tables(db_config: dict) -> list[str]:
    conn_factory = DatabaseConnection(DBConfig.from_dict(db_config))
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
