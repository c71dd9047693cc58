from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..core.enums import ACTIVE_BOOKING_STATUSES, BookingStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json_list, fetchall, fetchone, in_clause, load_json_list
from .model import NewBooking, QABooking
from .repository import BookingRepository

_COLUMNS = """
    booking_id, student_id, mentor_id, subject, chapter, summary, images,
    slot_start, slot_end, status, answer_text, answer_files, created_at, updated_at
"""

_ACTIVE = sorted(s.value for s in ACTIVE_BOOKING_STATUSES)


def _row_to_booking(r: dict) -> QABooking:
    return QABooking(
        booking_id=int(r["booking_id"]),
        student_id=int(r["student_id"]),
        mentor_id=int(r["mentor_id"]),
        subject=r["subject"],
        chapter=r.get("chapter"),
        summary=r["summary"],
        images=tuple(load_json_list(r.get("images"))),
        slot_start=r["slot_start"],
        slot_end=r["slot_end"],
        status=BookingStatus(r["status"]),
        answer_text=r.get("answer_text"),
        answer_files=tuple(load_json_list(r.get("answer_files"))),
        created_at=r["created_at"],
        updated_at=r.get("updated_at"),
    )


class MySQLBookingRepository(BookingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_if_slot_free(self, new: NewBooking) -> Optional[QABooking]:
        with db_cursor(self._conn_factory) as (_, cur):
            # Serialize bookings per mentor: MySQL has no exclusion constraint,
            # so concurrent check-then-insert for one mentor queues on this lock.
            cur.execute("SELECT user_id FROM users WHERE user_id=%s FOR UPDATE", (int(new.mentor_id),))
            if not fetchone(cur):
                return None

            cur.execute(
                f"""
                SELECT booking_id FROM qa_bookings
                WHERE mentor_id=%s
                  AND status IN ({in_clause(_ACTIVE)})
                  AND slot_start < %s
                  AND slot_end > %s
                LIMIT 1
                """,
                (int(new.mentor_id), *_ACTIVE, new.slot_end, new.slot_start),
            )
            if fetchone(cur):
                return None

            cur.execute(
                """
                INSERT INTO qa_bookings(
                    student_id, mentor_id, subject, chapter, summary, images, slot_start, slot_end, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(new.student_id),
                    int(new.mentor_id),
                    new.subject,
                    new.chapter,
                    new.summary,
                    dump_json_list(new.images),
                    new.slot_start,
                    new.slot_end,
                    BookingStatus.REQUESTED.value,
                ),
            )
            booking_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM qa_bookings WHERE booking_id=%s", (booking_id,))
            return _row_to_booking(fetchone(cur))

    def get_by_id(self, booking_id: int) -> Optional[QABooking]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM qa_bookings WHERE booking_id=%s", (int(booking_id),))
            r = fetchone(cur)
            return _row_to_booking(r) if r else None

    def transition(
        self,
        *,
        booking_id: int,
        to_status: BookingStatus,
        from_statuses: Optional[Iterable[BookingStatus]] = None,
        answer_text: Optional[str] = None,
        answer_files: Optional[Sequence[str]] = None,
    ) -> Optional[QABooking]:
        sets = ["status=%s"]
        params: list = [to_status.value]
        if answer_text is not None:
            sets.append("answer_text=%s")
            params.append(answer_text)
        if answer_files is not None:
            sets.append("answer_files=%s")
            params.append(dump_json_list(answer_files))

        sql = f"UPDATE qa_bookings SET {', '.join(sets)} WHERE booking_id=%s"
        params.append(int(booking_id))
        if from_statuses is not None:
            allowed = [s.value for s in from_statuses]
            sql += f" AND status IN ({in_clause(allowed)})"
            params.extend(allowed)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            if cur.rowcount <= 0:
                return None
            cur.execute(f"SELECT {_COLUMNS} FROM qa_bookings WHERE booking_id=%s", (int(booking_id),))
            return _row_to_booking(fetchone(cur))

    def list_completed_for_party(
        self,
        *,
        user_id: int,
        subject: Optional[str] = None,
        chapter: Optional[str] = None,
        limit: int = 200,
    ) -> Sequence[QABooking]:
        sql = f"""
            SELECT {_COLUMNS} FROM qa_bookings
            WHERE (student_id=%s OR mentor_id=%s) AND status=%s
        """
        params: list = [int(user_id), int(user_id), BookingStatus.COMPLETED.value]
        if subject:
            sql += " AND subject=%s"
            params.append(subject)
        if chapter:
            sql += " AND chapter=%s"
            params.append(chapter)
        sql += " ORDER BY created_at DESC, booking_id DESC LIMIT %s"
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_booking(r) for r in fetchall(cur)]
