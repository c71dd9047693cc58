from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import BookingStatus
from .model import NewBooking, QABooking


class BookingRepository(Protocol):
    def create_if_slot_free(self, new: NewBooking) -> Optional[QABooking]:
        """Insert ``new`` unless it overlaps an active booking of the same mentor.

        The overlap check and the insert must be serialized per mentor.
        Returns ``None`` when the slot is taken.
        """

        raise NotImplementedError

    def get_by_id(self, booking_id: int) -> Optional[QABooking]:
        raise NotImplementedError

    def transition(
        self,
        *,
        booking_id: int,
        to_status: BookingStatus,
        from_statuses: Optional[Iterable[BookingStatus]] = None,
        answer_text: Optional[str] = None,
        answer_files: Optional[Sequence[str]] = None,
    ) -> Optional[QABooking]:
        """Set ``to_status`` (and answer fields when given).

        With ``from_statuses`` the update only applies while the stored status
        is one of them. Returns the updated booking, or ``None`` if nothing
        was updated.
        """

        raise NotImplementedError

    def list_completed_for_party(
        self,
        *,
        user_id: int,
        subject: Optional[str] = None,
        chapter: Optional[str] = None,
        limit: int = 200,
    ) -> Sequence[QABooking]:
        raise NotImplementedError
