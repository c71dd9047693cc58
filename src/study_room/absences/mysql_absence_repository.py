from __future__ import annotations

from typing import Callable, Optional, Sequence

from ..core.enums import AbsenceStatus, AbsenceType, ApprovalDecision
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import AbsenceRequest, NewAbsenceRequest
from .repository import AbsenceRepository

_COLUMNS = """
    request_id, student_id, absence_date, type, start_at, end_at, reason_text, evidence_url,
    mentor_decision, parent_decision, status, mentor_comment, parent_comment, decided_at, created_at
"""


def _row_to_request(r: dict) -> AbsenceRequest:
    return AbsenceRequest(
        request_id=int(r["request_id"]),
        student_id=int(r["student_id"]),
        absence_date=r["absence_date"],
        type=AbsenceType(r["type"]),
        reason_text=r["reason_text"],
        created_at=r["created_at"],
        start_at=r.get("start_at"),
        end_at=r.get("end_at"),
        evidence_url=r.get("evidence_url"),
        mentor_decision=ApprovalDecision(r["mentor_decision"]),
        parent_decision=ApprovalDecision(r["parent_decision"]),
        status=AbsenceStatus(r["status"]),
        mentor_comment=r.get("mentor_comment"),
        parent_comment=r.get("parent_comment"),
        decided_at=r.get("decided_at"),
    )


class MySQLAbsenceRepository(AbsenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, new: NewAbsenceRequest) -> AbsenceRequest:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO absence_requests(
                    student_id, absence_date, type, start_at, end_at, reason_text, evidence_url,
                    mentor_decision, parent_decision, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(new.student_id),
                    new.absence_date,
                    new.type.value,
                    new.start_at,
                    new.end_at,
                    new.reason_text,
                    new.evidence_url,
                    ApprovalDecision.PENDING.value,
                    ApprovalDecision.PENDING.value,
                    AbsenceStatus.PENDING.value,
                ),
            )
            request_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM absence_requests WHERE request_id=%s", (request_id,))
            return _row_to_request(fetchone(cur))

    def get_by_id(self, request_id: int) -> Optional[AbsenceRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM absence_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _row_to_request(r) if r else None

    def decide(
        self,
        *,
        request_id: int,
        resolve: Callable[[AbsenceRequest], AbsenceRequest],
    ) -> Optional[AbsenceRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            # Row lock: a concurrent decision on the same request waits here
            # and then sees this transaction's committed fields.
            cur.execute(
                f"SELECT {_COLUMNS} FROM absence_requests WHERE request_id=%s FOR UPDATE",
                (int(request_id),),
            )
            r = fetchone(cur)
            if not r:
                return None

            updated = resolve(_row_to_request(r))
            cur.execute(
                """
                UPDATE absence_requests
                SET mentor_decision=%s, parent_decision=%s, status=%s,
                    mentor_comment=%s, parent_comment=%s, decided_at=%s
                WHERE request_id=%s
                """,
                (
                    updated.mentor_decision.value,
                    updated.parent_decision.value,
                    updated.status.value,
                    updated.mentor_comment,
                    updated.parent_comment,
                    updated.decided_at,
                    int(request_id),
                ),
            )
            return updated

    def list_requests(
        self,
        *,
        student_ids: Optional[Sequence[int]] = None,
        status: Optional[AbsenceStatus] = None,
        limit: int = 200,
    ) -> Sequence[AbsenceRequest]:
        if student_ids is not None and not student_ids:
            return []

        where: list[str] = []
        params: list = []
        if student_ids is not None:
            where.append(f"student_id IN ({in_clause(student_ids)})")
            params.extend(int(s) for s in student_ids)
        if status:
            where.append("status=%s")
            params.append(status.value)

        sql = f"SELECT {_COLUMNS} FROM absence_requests"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY created_at DESC, request_id DESC LIMIT %s"
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_request(r) for r in fetchall(cur)]
