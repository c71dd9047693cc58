from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

import pytest

from study_room.absences.model import AbsenceRequest, NewAbsenceRequest
from study_room.absences.service import AbsenceService
from study_room.auth.tokens import issue_access_token
from study_room.container import build_services
from study_room.core.enums import ACTIVE_BOOKING_STATUSES, AbsenceStatus, BookingStatus, Role, UserStatus
from study_room.main import create_app
from study_room.qa.model import NewBooking, QABooking
from study_room.qa.service import BookingService
from study_room.qa.slots import slots_overlap
from study_room.users.model import MentorListing, User

FIXED_NOW = datetime(2024, 3, 1, 9, 0, 0)

ADMIN_ID = 1
MENTOR_ID = 10
OTHER_MENTOR_ID = 11
INACTIVE_MENTOR_ID = 12
STUDENT_ID = 20
OTHER_STUDENT_ID = 21
PARENT_ID = 30
OTHER_PARENT_ID = 31


class InMemoryUsers:
    def __init__(self):
        self.users: dict[int, User] = {}
        self.links: set[tuple[int, int]] = set()
        self.profiles: dict[int, MentorListing] = {}

    def add(self, user_id: int, role: Role, *, status=UserStatus.ACTIVE, assigned_mentor_id=None, name=None) -> User:
        user = User(
            user_id=user_id,
            full_name=name or f"{role.value.title()} {user_id}",
            email=f"user{user_id}@example.com",
            role=role,
            status=status,
            assigned_mentor_id=assigned_mentor_id,
        )
        self.users[user_id] = user
        return user

    def link(self, parent_id: int, student_id: int) -> None:
        self.links.add((parent_id, student_id))

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(int(user_id))

    def get_active_mentor(self, user_id: int) -> Optional[User]:
        user = self.users.get(int(user_id))
        if user and user.role == Role.MENTOR and user.is_active:
            return user
        return None

    def get_assigned_mentor_id(self, student_id: int) -> Optional[int]:
        user = self.users.get(int(student_id))
        return user.assigned_mentor_id if user and user.role == Role.STUDENT else None

    def is_parent_linked(self, parent_id: int, student_id: int) -> bool:
        return (int(parent_id), int(student_id)) in self.links

    def list_linked_student_ids(self, parent_id: int):
        return sorted(s for p, s in self.links if p == int(parent_id))

    def list_assigned_student_ids(self, mentor_id: int):
        return sorted(
            u.user_id for u in self.users.values()
            if u.role == Role.STUDENT and u.assigned_mentor_id == int(mentor_id)
        )

    def list_active_mentors(self):
        return [
            p for uid, p in sorted(self.profiles.items())
            if self.get_active_mentor(uid) is not None
        ]


class InMemoryAbsences:
    """Absence store; ``decide`` holds a lock across read, resolve and write."""

    def __init__(self, clock: Callable[[], datetime] = lambda: FIXED_NOW):
        self._rows: dict[int, AbsenceRequest] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self._clock = clock

    def create(self, new: NewAbsenceRequest) -> AbsenceRequest:
        with self._lock:
            rid = self._next_id
            self._next_id += 1
            row = AbsenceRequest(
                request_id=rid,
                student_id=new.student_id,
                absence_date=new.absence_date,
                type=new.type,
                reason_text=new.reason_text,
                start_at=new.start_at,
                end_at=new.end_at,
                evidence_url=new.evidence_url,
                created_at=self._clock(),
            )
            self._rows[rid] = row
            return row

    def get_by_id(self, request_id: int) -> Optional[AbsenceRequest]:
        return self._rows.get(int(request_id))

    def decide(self, *, request_id: int, resolve) -> Optional[AbsenceRequest]:
        with self._lock:
            current = self._rows.get(int(request_id))
            if current is None:
                return None
            updated = resolve(current)
            self._rows[int(request_id)] = updated
            return updated

    def list_requests(self, *, student_ids=None, status: Optional[AbsenceStatus] = None, limit: int = 200):
        rows = [
            r for r in self._rows.values()
            if (student_ids is None or r.student_id in student_ids) and (status is None or r.status == status)
        ]
        rows.sort(key=lambda r: (r.created_at, r.request_id), reverse=True)
        return rows[:limit]


class InMemoryBookings:
    """Booking store; overlap check and insert happen under one lock."""

    def __init__(self, clock: Callable[[], datetime] = lambda: FIXED_NOW):
        self._rows: dict[int, QABooking] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self._clock = clock

    def all(self) -> list[QABooking]:
        return list(self._rows.values())

    def seed(self, **fields) -> QABooking:
        with self._lock:
            bid = self._next_id
            self._next_id += 1
            fields.setdefault("created_at", self._clock())
            row = QABooking(booking_id=bid, **fields)
            self._rows[bid] = row
            return row

    def create_if_slot_free(self, new: NewBooking) -> Optional[QABooking]:
        with self._lock:
            for b in self._rows.values():
                if (
                    b.mentor_id == new.mentor_id
                    and b.status in ACTIVE_BOOKING_STATUSES
                    and slots_overlap(b.slot_start, b.slot_end, new.slot_start, new.slot_end)
                ):
                    return None
            bid = self._next_id
            self._next_id += 1
            row = QABooking(
                booking_id=bid,
                student_id=new.student_id,
                mentor_id=new.mentor_id,
                subject=new.subject,
                chapter=new.chapter,
                summary=new.summary,
                images=tuple(new.images),
                slot_start=new.slot_start,
                slot_end=new.slot_end,
                status=BookingStatus.REQUESTED,
                created_at=self._clock(),
            )
            self._rows[bid] = row
            return row

    def get_by_id(self, booking_id: int) -> Optional[QABooking]:
        return self._rows.get(int(booking_id))

    def transition(self, *, booking_id, to_status, from_statuses=None, answer_text=None, answer_files=None):
        with self._lock:
            current = self._rows.get(int(booking_id))
            if current is None:
                return None
            if from_statuses is not None and current.status not in tuple(from_statuses):
                return None
            changes = {"status": to_status, "updated_at": self._clock()}
            if answer_text is not None:
                changes["answer_text"] = answer_text
            if answer_files is not None:
                changes["answer_files"] = tuple(answer_files)
            updated = replace(current, **changes)
            self._rows[int(booking_id)] = updated
            return updated

    def list_completed_for_party(self, *, user_id, subject=None, chapter=None, limit=200):
        rows = [
            b for b in self._rows.values()
            if user_id in (b.student_id, b.mentor_id)
            and b.status == BookingStatus.COMPLETED
            and (subject is None or b.subject == subject)
            and (chapter is None or b.chapter == chapter)
        ]
        rows.sort(key=lambda b: (b.created_at, b.booking_id), reverse=True)
        return rows[:limit]


@pytest.fixture
def users() -> InMemoryUsers:
    """Admin, two mentors (+ one inactive), two students, two parents.

    STUDENT_ID is assigned to MENTOR_ID and linked to PARENT_ID;
    OTHER_STUDENT_ID is assigned to OTHER_MENTOR_ID and linked to OTHER_PARENT_ID.
    """
    u = InMemoryUsers()
    u.add(ADMIN_ID, Role.ADMIN)
    u.add(MENTOR_ID, Role.MENTOR, name="Minh Mentor")
    u.add(OTHER_MENTOR_ID, Role.MENTOR, name="Lan Mentor")
    u.add(INACTIVE_MENTOR_ID, Role.MENTOR, status=UserStatus.INACTIVE)
    u.add(STUDENT_ID, Role.STUDENT, assigned_mentor_id=MENTOR_ID)
    u.add(OTHER_STUDENT_ID, Role.STUDENT, assigned_mentor_id=OTHER_MENTOR_ID)
    u.add(PARENT_ID, Role.PARENT)
    u.add(OTHER_PARENT_ID, Role.PARENT)
    u.link(PARENT_ID, STUDENT_ID)
    u.link(OTHER_PARENT_ID, OTHER_STUDENT_ID)
    u.profiles[MENTOR_ID] = MentorListing(
        user_id=MENTOR_ID, full_name="Minh Mentor", email="user10@example.com", subjects=("MATH", "PHYSICS")
    )
    u.profiles[OTHER_MENTOR_ID] = MentorListing(
        user_id=OTHER_MENTOR_ID, full_name="Lan Mentor", email="user11@example.com", subjects=("ENGLISH",)
    )
    u.profiles[INACTIVE_MENTOR_ID] = MentorListing(
        user_id=INACTIVE_MENTOR_ID, full_name="Gone", email="user12@example.com", subjects=("MATH",)
    )
    return u


@pytest.fixture
def absences_repo() -> InMemoryAbsences:
    return InMemoryAbsences()


@pytest.fixture
def bookings_repo() -> InMemoryBookings:
    return InMemoryBookings()


@pytest.fixture
def absence_service(absences_repo, users) -> AbsenceService:
    return AbsenceService(absences_repo, users, clock=lambda: FIXED_NOW)


@pytest.fixture
def booking_service(bookings_repo, users) -> BookingService:
    return BookingService(bookings_repo, users)


@pytest.fixture
def strict_booking_service(bookings_repo, users) -> BookingService:
    return BookingService(bookings_repo, users, strict_answer=True)


@pytest.fixture
def app(users, absences_repo, bookings_repo):
    container = build_services(users_repo=users, absences_repo=absences_repo, bookings_repo=bookings_repo)
    return create_app(settings_module="study_room.config.testing", container=container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_header(app):
    def make(user_id: int, role: Role) -> dict:
        token = issue_access_token(user_id=user_id, role=role, secret=app.config["JWT_SECRET"])
        return {"Authorization": f"Bearer {token}"}

    return make
