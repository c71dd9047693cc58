from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..access.policy import may_book, may_cancel_booking, mentor_owns_booking
from ..common.validators import optional_text, require_int, require_non_empty, string_list
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import BookingStatus, Role
from ..core.exceptions import ConflictError, NotFoundError
from ..users.repository import UserDirectory
from .model import NewBooking, QABooking
from .repository import BookingRepository
from .slots import validate_slot

logger = logging.getLogger(__name__)

SLOT_TAKEN = "Time slot is already booked"

_ANSWERABLE = (BookingStatus.ACCEPTED, BookingStatus.IN_PROGRESS)


class BookingService:
    """Use cases: book mentor Q&A slots without double-booking and drive their lifecycle.

    ``strict_answer`` controls whether :meth:`answer` requires the booking to be
    ACCEPTED or IN_PROGRESS first and carry answer text. When off, any booking
    of the mentor can be answered, with or without text.
    """

    def __init__(self, bookings: BookingRepository, users: UserDirectory, *, strict_answer: bool = False):
        self._bookings = bookings
        self._users = users
        self._strict_answer = bool(strict_answer)

    def book(
        self,
        *,
        current_role: Role,
        student_id: int,
        mentor_id,
        subject: str,
        summary: str,
        slot_start: datetime,
        slot_end: datetime,
        chapter: Optional[str] = None,
        images: Optional[Sequence[str]] = None,
    ) -> QABooking:
        validate_slot(slot_start, slot_end)
        may_book(current_role).enforce()

        mentor_id = require_int(mentor_id, "mentorId")
        new = NewBooking(
            student_id=int(student_id),
            mentor_id=mentor_id,
            subject=require_non_empty(subject, "subject"),
            summary=require_non_empty(summary, "summary"),
            chapter=optional_text(chapter),
            images=tuple(string_list(images, "images")),
            slot_start=slot_start,
            slot_end=slot_end,
        )

        if not self._users.get_active_mentor(mentor_id):
            raise NotFoundError("Mentor not found")

        booking = self._bookings.create_if_slot_free(new)
        if booking is None:
            logger.warning(
                "booking rejected: mentor %s slot %s-%s overlaps an active booking",
                mentor_id, slot_start.isoformat(), slot_end.isoformat(),
            )
            raise ConflictError(SLOT_TAKEN)

        logger.info("booking %s requested by student %s with mentor %s", booking.booking_id, student_id, mentor_id)
        return booking

    def _get_owned(self, booking_id: int, acting_mentor_id: int) -> QABooking:
        booking = self._bookings.get_by_id(int(booking_id))
        if not booking:
            raise NotFoundError("Booking not found")
        mentor_owns_booking(acting_mentor_id, booking.mentor_id).enforce()
        return booking

    def _move(self, booking: QABooking, to_status: BookingStatus, *, from_status: BookingStatus, error: str) -> QABooking:
        if booking.status != from_status:
            raise ConflictError(error)
        updated = self._bookings.transition(
            booking_id=booking.booking_id,
            to_status=to_status,
            from_statuses=(from_status,),
        )
        if updated is None:
            # Lost a race with another transition of the same booking.
            raise ConflictError(error)
        logger.info("booking %s: %s -> %s", booking.booking_id, from_status.value, to_status.value)
        return updated

    def accept(self, *, booking_id: int, acting_mentor_id: int) -> QABooking:
        booking = self._get_owned(booking_id, acting_mentor_id)
        return self._move(
            booking,
            BookingStatus.ACCEPTED,
            from_status=BookingStatus.REQUESTED,
            error="Booking already processed",
        )

    def start(self, *, booking_id: int, acting_mentor_id: int) -> QABooking:
        booking = self._get_owned(booking_id, acting_mentor_id)
        return self._move(
            booking,
            BookingStatus.IN_PROGRESS,
            from_status=BookingStatus.ACCEPTED,
            error="Only accepted bookings can be started",
        )

    def cancel(self, *, booking_id: int, acting_user_id: int, acting_role: Role) -> QABooking:
        booking = self._bookings.get_by_id(int(booking_id))
        if not booking:
            raise NotFoundError("Booking not found")
        may_cancel_booking(
            acting_user_id,
            acting_role,
            booking_student_id=booking.student_id,
            booking_mentor_id=booking.mentor_id,
        ).enforce()
        return self._move(
            booking,
            BookingStatus.CANCELLED,
            from_status=BookingStatus.REQUESTED,
            error="Only requested bookings can be cancelled",
        )

    def answer(
        self,
        *,
        booking_id: int,
        acting_mentor_id: int,
        answer_text: Optional[str] = None,
        answer_files: Optional[Sequence[str]] = None,
    ) -> QABooking:
        booking = self._get_owned(booking_id, acting_mentor_id)
        # Answer text is optional unless strict.
        if self._strict_answer:
            text = require_non_empty(answer_text, "answerText")
        else:
            text = optional_text(answer_text)
        files = string_list(answer_files, "answerFiles")

        from_statuses = None
        if booking.status not in _ANSWERABLE:
            if self._strict_answer:
                raise ConflictError("Booking must be accepted before it can be answered")
            logger.warning(
                "booking %s answered from status %s (strict answer mode is off)",
                booking.booking_id, booking.status.value,
            )
        if self._strict_answer:
            from_statuses = _ANSWERABLE

        updated = self._bookings.transition(
            booking_id=booking.booking_id,
            to_status=BookingStatus.COMPLETED,
            from_statuses=from_statuses,
            answer_text=text,
            answer_files=files,
        )
        if updated is None:
            raise ConflictError("Booking must be accepted before it can be answered")

        logger.info("booking %s answered by mentor %s", booking.booking_id, acting_mentor_id)
        return updated

    def history(
        self,
        *,
        caller_id: int,
        subject: Optional[str] = None,
        chapter: Optional[str] = None,
    ) -> Sequence[QABooking]:
        return self._bookings.list_completed_for_party(
            user_id=int(caller_id),
            subject=optional_text(subject),
            chapter=optional_text(chapter),
            limit=DEFAULT_LIST_LIMIT,
        )
