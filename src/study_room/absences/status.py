"""Dual-approval rules for absence requests.

Two approvers (the student's assigned mentor and a linked parent) decide
independently. The aggregate status is always recomputed from both fields:

    mentor    parent    status
    APPROVED  APPROVED  APPROVED
    REJECTED  *         REJECTED
    *         REJECTED  REJECTED
    APPROVED  PENDING   PARTIAL
    PENDING   APPROVED  PARTIAL
    PENDING   PENDING   PENDING
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import Optional

from ..core.enums import AbsenceStatus, ApprovalDecision, DecisionAction, Role
from ..core.exceptions import ConflictError
from .model import AbsenceRequest


class Approver(str, Enum):
    MENTOR = "MENTOR"
    PARENT = "PARENT"

    @classmethod
    def for_role(cls, role: Role) -> "Approver":
        return cls(role.value)


_ACTION_TO_DECISION = {
    DecisionAction.APPROVE: ApprovalDecision.APPROVED,
    DecisionAction.REJECT: ApprovalDecision.REJECTED,
}


def aggregate_status(mentor: ApprovalDecision, parent: ApprovalDecision) -> AbsenceStatus:
    if ApprovalDecision.REJECTED in (mentor, parent):
        return AbsenceStatus.REJECTED
    if mentor == ApprovalDecision.APPROVED and parent == ApprovalDecision.APPROVED:
        return AbsenceStatus.APPROVED
    if ApprovalDecision.APPROVED in (mentor, parent):
        return AbsenceStatus.PARTIAL
    return AbsenceStatus.PENDING


def apply_decision(
    request: AbsenceRequest,
    *,
    approver: Approver,
    action: DecisionAction,
    comment: Optional[str],
    now: datetime,
) -> AbsenceRequest:
    """Return ``request`` with one approver's decision written and status recomputed."""
    if request.status.is_terminal:
        raise ConflictError(f"Request already {request.status.value.lower()}")

    decision = _ACTION_TO_DECISION[action]
    current = request.mentor_decision if approver == Approver.MENTOR else request.parent_decision
    if current != ApprovalDecision.PENDING and current != decision:
        raise ConflictError(f"{approver.value.title()} decision is already {current.value.lower()}")

    if approver == Approver.MENTOR:
        updated = replace(request, mentor_decision=decision, mentor_comment=comment)
    else:
        updated = replace(request, parent_decision=decision, parent_comment=comment)

    status = aggregate_status(updated.mentor_decision, updated.parent_decision)
    return replace(updated, status=status, decided_at=now if status.is_terminal else None)
