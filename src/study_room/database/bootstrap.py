from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from ..core.enums import Role, UserStatus
from .connection import DatabaseConnection, DBConfig


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql usable regardless of the configured DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal splitter for schema files: ';' inside quotes and '--' comment lines are skipped.
    buf: list[str] = []
    quote = ""
    escape = False

    for line in sql.splitlines(keepends=True):
        if not quote and line.lstrip().startswith("--"):
            continue
        for ch in line:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif quote:
                if ch == quote:
                    quote = ""
            elif ch in ("'", '"'):
                quote = ch
            elif ch == ";":
                stmt = "".join(buf).strip()
                buf.clear()
                if stmt:
                    yield stmt
                continue
            buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    config = DBConfig.from_dict(db_config)
    conn = DatabaseConnection(config).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_demo_users(db_config: dict) -> dict[str, int]:
    """Upsert one user per role and wire the relations between them.

    Returns the ids keyed by email so scripts can mint tokens for them.
    """
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor(dictionary=True)

        def upsert_user(full_name: str, email: str, password: str, role: Role) -> int:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
            existing = cur.fetchone()
            if existing:
                cur.execute(
                    "UPDATE users SET full_name=%s, password_hash=%s, role=%s, status=%s WHERE user_id=%s",
                    (full_name, password_hash, role.value, UserStatus.ACTIVE.value, existing["user_id"]),
                )
                return int(existing["user_id"])
            cur.execute(
                """
                INSERT INTO users (full_name, email, password_hash, role, status)
                VALUES (%s, %s, %s, %s, %s)
                """,
                (full_name, email, password_hash, role.value, UserStatus.ACTIVE.value),
            )
            return int(cur.lastrowid)

        ids = {
            "admin@studyroom.local": upsert_user("Admin Demo", "admin@studyroom.local", "admin123", Role.ADMIN),
            "mentor@studyroom.local": upsert_user("Mentor Demo", "mentor@studyroom.local", "mentor123", Role.MENTOR),
            "student@studyroom.local": upsert_user("Student Demo", "student@studyroom.local", "student123", Role.STUDENT),
            "parent@studyroom.local": upsert_user("Parent Demo", "parent@studyroom.local", "parent123", Role.PARENT),
        }
        mentor_id = ids["mentor@studyroom.local"]
        student_id = ids["student@studyroom.local"]
        parent_id = ids["parent@studyroom.local"]

        cur.execute(
            """
            INSERT INTO mentor_profiles (user_id, university, major, bio, subjects)
            VALUES (%s, %s, %s, %s, %s)
            ON DUPLICATE KEY UPDATE subjects=VALUES(subjects)
            """,
            (mentor_id, "Demo University", "Mathematics", "Demo mentor", json.dumps(["MATH", "PHYSICS"])),
        )
        cur.execute("UPDATE users SET assigned_mentor_id=%s WHERE user_id=%s", (mentor_id, student_id))
        cur.execute(
            "INSERT IGNORE INTO parent_links (parent_id, student_id) VALUES (%s, %s)",
            (parent_id, student_id),
        )

        conn.commit()
        return ids
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
