"""JSON shapes returned to the client (camelCase keys, ISO-8601 timestamps)."""

from __future__ import annotations

from typing import Optional

from ..absences.model import AbsenceRequest
from ..common.datetime_utils import isoformat
from ..qa.model import QABooking
from ..users.model import MentorListing, User


def party_json(user: Optional[User], *, with_email: bool = False) -> Optional[dict]:
    if user is None:
        return None
    out = {"id": user.user_id, "name": user.full_name}
    if with_email:
        out["email"] = user.email
    return out


def absence_json(r: AbsenceRequest, *, student: Optional[User] = None) -> dict:
    return {
        "id": r.request_id,
        "studentId": r.student_id,
        "student": party_json(student, with_email=True),
        "date": r.absence_date.isoformat(),
        "type": r.type.value,
        "startAt": isoformat(r.start_at),
        "endAt": isoformat(r.end_at),
        "reasonText": r.reason_text,
        "evidenceUrl": r.evidence_url,
        "mentorDecision": r.mentor_decision.value,
        "parentDecision": r.parent_decision.value,
        "status": r.status.value,
        "mentorComment": r.mentor_comment,
        "parentComment": r.parent_comment,
        "decidedAt": isoformat(r.decided_at),
        "createdAt": isoformat(r.created_at),
    }


def booking_json(
    b: QABooking,
    *,
    student: Optional[User] = None,
    mentor: Optional[User] = None,
    with_email: bool = False,
) -> dict:
    """``with_email`` adds contact emails to the embedded parties; history listings omit them."""
    return {
        "id": b.booking_id,
        "studentId": b.student_id,
        "mentorId": b.mentor_id,
        "student": party_json(student, with_email=with_email),
        "mentor": party_json(mentor, with_email=with_email),
        "subject": b.subject,
        "chapter": b.chapter,
        "summary": b.summary,
        "images": list(b.images),
        "slotStart": isoformat(b.slot_start),
        "slotEnd": isoformat(b.slot_end),
        "status": b.status.value,
        "answerText": b.answer_text,
        "answerFiles": list(b.answer_files),
        "createdAt": isoformat(b.created_at),
        "updatedAt": isoformat(b.updated_at),
    }


def mentor_json(m: MentorListing) -> dict:
    return {
        "id": m.user_id,
        "name": m.full_name,
        "email": m.email,
        "university": m.university,
        "major": m.major,
        "bio": m.bio,
        "subjects": list(m.subjects),
        "rating": m.rating_avg,
    }
