from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield ``(conn, cursor)`` wrapped in one transaction.

    Commits when the block exits normally and rolls back on any exception,
    including domain errors raised from inside the block.
    """
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
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


def load_json_list(value: Any) -> list:
    """Decode a JSON array column; the connector may hand back str or bytes."""
    if value is None:
        return []
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        value = json.loads(value) if value.strip() else []
    return list(value)


def dump_json_list(values) -> str:
    return json.dumps(list(values or []))


def in_clause(values) -> str:
    """Placeholder list for ``IN (...)``; callers must pass a non-empty sequence."""
    return ",".join(["%s"] * len(values))
