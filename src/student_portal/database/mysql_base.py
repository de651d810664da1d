from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.exceptions import BackendError
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection per unit of work: commit on success, roll back on error.

    Driver errors surface as ``BackendError`` carrying the driver's message.
    """
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        raise BackendError(str(e)) from e
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        conn.rollback()
        raise BackendError(str(e)) from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def is_duplicate_key(error: BaseException) -> bool:
    """True when a unique index rejected the insert (MySQL ER_DUP_ENTRY)."""
    cause = error.__cause__ if isinstance(error, BackendError) else error
    return getattr(cause, "errno", None) == 1062
