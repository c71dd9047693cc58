"""Authorization rules, one function per (role, action) pair.

Every rule returns an :class:`AccessDecision`; services call ``enforce()`` to
turn a denial into :class:`ForbiddenError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from ..core.enums import Role
from ..core.exceptions import ForbiddenError


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: str = ""

    def enforce(self) -> None:
        if not self.allowed:
            raise ForbiddenError(self.reason or "Not authorized")


ALLOW = AccessDecision(True)


def deny(reason: str) -> AccessDecision:
    return AccessDecision(False, reason)


# Absence requests


def may_submit_absence(role: Role) -> AccessDecision:
    if role == Role.STUDENT:
        return ALLOW
    return deny("Only students can submit absence requests")


def mentor_may_decide_absence(mentor_id: int, assigned_mentor_id: Optional[int]) -> AccessDecision:
    if assigned_mentor_id is not None and int(mentor_id) == int(assigned_mentor_id):
        return ALLOW
    return deny("Not the assigned mentor of this student")


def parent_may_decide_absence(linked: bool) -> AccessDecision:
    return ALLOW if linked else deny("Not authorized")


@dataclass(frozen=True)
class AbsenceDecisionContext:
    """Relationship facts a decision rule may need, fetched lazily."""

    acting_user_id: int
    student_id: int
    assigned_mentor_id: Callable[[int], Optional[int]]
    parent_linked: Callable[[int, int], bool]


def _mentor_rule(ctx: AbsenceDecisionContext) -> AccessDecision:
    return mentor_may_decide_absence(ctx.acting_user_id, ctx.assigned_mentor_id(ctx.student_id))


def _parent_rule(ctx: AbsenceDecisionContext) -> AccessDecision:
    return parent_may_decide_absence(ctx.parent_linked(ctx.acting_user_id, ctx.student_id))


_ABSENCE_DECISION_RULES: Mapping[Role, Callable[[AbsenceDecisionContext], AccessDecision]] = {
    Role.MENTOR: _mentor_rule,
    Role.PARENT: _parent_rule,
}


def may_decide_absence(role: Role, ctx: AbsenceDecisionContext) -> AccessDecision:
    rule = _ABSENCE_DECISION_RULES.get(role)
    if rule is None:
        return deny("Only mentors and parents can decide absence requests")
    return rule(ctx)


# Q&A bookings


def may_book(role: Role) -> AccessDecision:
    if role == Role.STUDENT:
        return ALLOW
    return deny("Only students can book Q&A sessions")


def mentor_owns_booking(acting_mentor_id: int, booking_mentor_id: int) -> AccessDecision:
    if int(acting_mentor_id) == int(booking_mentor_id):
        return ALLOW
    return deny("Not your booking")


def may_cancel_booking(
    acting_user_id: int,
    role: Role,
    *,
    booking_student_id: int,
    booking_mentor_id: int,
) -> AccessDecision:
    if role == Role.STUDENT and int(acting_user_id) == int(booking_student_id):
        return ALLOW
    if role == Role.MENTOR:
        return mentor_owns_booking(acting_user_id, booking_mentor_id)
    return deny("Not your booking")
