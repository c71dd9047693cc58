from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    STUDENT = "STUDENT"
    PARENT = "PARENT"
    MENTOR = "MENTOR"
    ADMIN = "ADMIN"


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    PENDING = "PENDING"


class AbsenceType(str, Enum):
    """Category of an absence request."""

    ABSENT = "ABSENT"
    LATE = "LATE"
    EARLY_LEAVE = "EARLY_LEAVE"
    OFFSITE = "OFFSITE"


class ApprovalDecision(str, Enum):
    """Decision stored per approver (mentor / parent)."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class DecisionAction(str, Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"


class AbsenceStatus(str, Enum):
    """Aggregate status derived from both approver decisions."""

    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self in (AbsenceStatus.APPROVED, AbsenceStatus.REJECTED)


class BookingStatus(str, Enum):
    """Lifecycle of a Q&A booking."""

    REQUESTED = "REQUESTED"
    ACCEPTED = "ACCEPTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Statuses that occupy a mentor's time slot.
ACTIVE_BOOKING_STATUSES = frozenset(
    {BookingStatus.REQUESTED, BookingStatus.ACCEPTED, BookingStatus.IN_PROGRESS}
)
