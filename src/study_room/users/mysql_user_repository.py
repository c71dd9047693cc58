from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role, UserStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json_list
from .model import MentorListing, User
from .repository import UserDirectory

_USER_COLUMNS = "user_id, full_name, email, role, status, assigned_mentor_id"


def _row_to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        email=row["email"],
        role=Role(row["role"]),
        status=UserStatus(row["status"]),
        assigned_mentor_id=row.get("assigned_mentor_id"),
    )


class MySQLUserDirectory(UserDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_active_mentor(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE user_id=%s AND role=%s AND status=%s",
                (int(user_id), Role.MENTOR.value, UserStatus.ACTIVE.value),
            )
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_assigned_mentor_id(self, student_id: int) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT assigned_mentor_id FROM users WHERE user_id=%s AND role=%s",
                (int(student_id), Role.STUDENT.value),
            )
            row = fetchone(cur)
            if not row or row.get("assigned_mentor_id") is None:
                return None
            return int(row["assigned_mentor_id"])

    def is_parent_linked(self, parent_id: int, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS linked FROM parent_links WHERE parent_id=%s AND student_id=%s",
                (int(parent_id), int(student_id)),
            )
            return fetchone(cur) is not None

    def list_linked_student_ids(self, parent_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT student_id FROM parent_links WHERE parent_id=%s ORDER BY student_id",
                (int(parent_id),),
            )
            return [int(r["student_id"]) for r in fetchall(cur)]

    def list_assigned_student_ids(self, mentor_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id FROM users WHERE assigned_mentor_id=%s AND role=%s ORDER BY user_id",
                (int(mentor_id), Role.STUDENT.value),
            )
            return [int(r["user_id"]) for r in fetchall(cur)]

    def list_active_mentors(self) -> Sequence[MentorListing]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.user_id, u.full_name, u.email,
                       p.university, p.major, p.bio, p.subjects, p.rating_avg
                FROM users u
                JOIN mentor_profiles p ON p.user_id = u.user_id
                WHERE u.role=%s AND u.status=%s
                ORDER BY u.full_name
                """,
                (Role.MENTOR.value, UserStatus.ACTIVE.value),
            )
            out: list[MentorListing] = []
            for r in fetchall(cur):
                out.append(
                    MentorListing(
                        user_id=int(r["user_id"]),
                        full_name=r["full_name"],
                        email=r["email"],
                        university=r.get("university"),
                        major=r.get("major"),
                        bio=r.get("bio"),
                        subjects=tuple(load_json_list(r.get("subjects"))),
                        rating_avg=float(r["rating_avg"]) if r.get("rating_avg") is not None else None,
                    )
                )
            return out
