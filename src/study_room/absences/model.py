from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AbsenceStatus, AbsenceType, ApprovalDecision


@dataclass(frozen=True)
class NewAbsenceRequest:
    student_id: int
    absence_date: date
    type: AbsenceType
    reason_text: str
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    evidence_url: Optional[str] = None


@dataclass(frozen=True)
class AbsenceRequest:
    request_id: int
    student_id: int
    absence_date: date
    type: AbsenceType
    reason_text: str
    created_at: datetime
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    evidence_url: Optional[str] = None
    mentor_decision: ApprovalDecision = ApprovalDecision.PENDING
    parent_decision: ApprovalDecision = ApprovalDecision.PENDING
    status: AbsenceStatus = AbsenceStatus.PENDING
    mentor_comment: Optional[str] = None
    parent_comment: Optional[str] = None
    decided_at: Optional[datetime] = None
