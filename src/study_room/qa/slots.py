from __future__ import annotations

from datetime import datetime

from ..core.exceptions import ValidationError


def validate_slot(slot_start: datetime, slot_end: datetime) -> None:
    if slot_end <= slot_start:
        raise ValidationError("slotEnd must be after slotStart")


def slots_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open intervals: [10:00, 11:00) and [11:00, 11:30) do not overlap."""
    return a_start < b_end and a_end > b_start
