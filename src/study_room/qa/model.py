from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import BookingStatus


@dataclass(frozen=True)
class NewBooking:
    student_id: int
    mentor_id: int
    subject: str
    summary: str
    slot_start: datetime
    slot_end: datetime
    chapter: Optional[str] = None
    images: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class QABooking:
    booking_id: int
    student_id: int
    mentor_id: int
    subject: str
    summary: str
    slot_start: datetime
    slot_end: datetime
    status: BookingStatus
    created_at: datetime
    chapter: Optional[str] = None
    images: tuple[str, ...] = field(default_factory=tuple)
    answer_text: Optional[str] = None
    answer_files: tuple[str, ...] = field(default_factory=tuple)
    updated_at: Optional[datetime] = None
