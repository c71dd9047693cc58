from __future__ import annotations

from datetime import date, datetime
from itertools import product

import pytest

from study_room.absences.model import AbsenceRequest
from study_room.absences.status import Approver, aggregate_status, apply_decision
from study_room.core.enums import AbsenceStatus, AbsenceType, ApprovalDecision, DecisionAction
from study_room.core.exceptions import ConflictError

P, A, R = ApprovalDecision.PENDING, ApprovalDecision.APPROVED, ApprovalDecision.REJECTED

EXPECTED = {
    (P, P): AbsenceStatus.PENDING,
    (A, P): AbsenceStatus.PARTIAL,
    (P, A): AbsenceStatus.PARTIAL,
    (A, A): AbsenceStatus.APPROVED,
    (R, P): AbsenceStatus.REJECTED,
    (R, A): AbsenceStatus.REJECTED,
    (R, R): AbsenceStatus.REJECTED,
    (P, R): AbsenceStatus.REJECTED,
    (A, R): AbsenceStatus.REJECTED,
}

NOW = datetime(2024, 3, 1, 12, 0, 0)


def _pending() -> AbsenceRequest:
    return AbsenceRequest(
        request_id=1,
        student_id=20,
        absence_date=date(2024, 3, 1),
        type=AbsenceType.ABSENT,
        reason_text="doctor",
        created_at=datetime(2024, 2, 28, 8, 0, 0),
    )


def test_table_covers_all_nine_combinations():
    assert set(EXPECTED) == set(product(ApprovalDecision, repeat=2))


@pytest.mark.parametrize("mentor,parent", sorted(EXPECTED, key=lambda k: (k[0].value, k[1].value)))
def test_aggregate_status_matches_table(mentor, parent):
    assert aggregate_status(mentor, parent) == EXPECTED[(mentor, parent)]


@pytest.mark.parametrize("first", [Approver.MENTOR, Approver.PARENT])
def test_reject_after_other_side_approved_is_rejected_in_either_order(first):
    second = Approver.PARENT if first == Approver.MENTOR else Approver.MENTOR
    req = apply_decision(_pending(), approver=first, action=DecisionAction.APPROVE, comment=None, now=NOW)
    assert req.status == AbsenceStatus.PARTIAL

    req = apply_decision(req, approver=second, action=DecisionAction.REJECT, comment="no", now=NOW)
    assert req.status == AbsenceStatus.REJECTED
    assert req.decided_at == NOW


def test_reject_on_fresh_request_is_terminal_immediately():
    req = apply_decision(_pending(), approver=Approver.PARENT, action=DecisionAction.REJECT, comment=None, now=NOW)
    assert req.status == AbsenceStatus.REJECTED
    assert req.mentor_decision == ApprovalDecision.PENDING
    assert req.decided_at == NOW


@pytest.mark.parametrize("steps", [
    [],
    [(Approver.MENTOR, DecisionAction.APPROVE)],
    [(Approver.PARENT, DecisionAction.APPROVE)],
    [(Approver.MENTOR, DecisionAction.APPROVE), (Approver.PARENT, DecisionAction.APPROVE)],
    [(Approver.PARENT, DecisionAction.APPROVE), (Approver.MENTOR, DecisionAction.REJECT)],
    [(Approver.MENTOR, DecisionAction.REJECT)],
])
def test_decided_at_set_only_for_terminal_status(steps):
    req = _pending()
    for approver, action in steps:
        req = apply_decision(req, approver=approver, action=action, comment=None, now=NOW)
    assert (req.decided_at is not None) == req.status.is_terminal
    assert req.status == aggregate_status(req.mentor_decision, req.parent_decision)


@pytest.mark.parametrize("action", list(DecisionAction))
def test_terminal_request_refuses_further_decisions(action):
    req = apply_decision(_pending(), approver=Approver.MENTOR, action=DecisionAction.REJECT, comment=None, now=NOW)
    with pytest.raises(ConflictError):
        apply_decision(req, approver=Approver.PARENT, action=action, comment=None, now=NOW)


def test_same_decision_resubmitted_overwrites_comment():
    req = apply_decision(_pending(), approver=Approver.MENTOR, action=DecisionAction.APPROVE, comment="ok", now=NOW)
    req = apply_decision(req, approver=Approver.MENTOR, action=DecisionAction.APPROVE, comment="ok, see note", now=NOW)
    assert req.mentor_comment == "ok, see note"
    assert req.status == AbsenceStatus.PARTIAL
    assert req.decided_at is None


def test_approver_cannot_reverse_own_approval():
    req = apply_decision(_pending(), approver=Approver.MENTOR, action=DecisionAction.APPROVE, comment=None, now=NOW)
    with pytest.raises(ConflictError):
        apply_decision(req, approver=Approver.MENTOR, action=DecisionAction.REJECT, comment=None, now=NOW)
