from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..access.policy import AbsenceDecisionContext, deny, may_decide_absence, may_submit_absence
from ..common.datetime_utils import utc_now
from ..common.validators import optional_text, require_enum, require_non_empty
from ..core.constants import DEFAULT_ADMIN_LIST_LIMIT, DEFAULT_LIST_LIMIT
from ..core.enums import AbsenceStatus, AbsenceType, DecisionAction, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..users.repository import UserDirectory
from .model import AbsenceRequest, NewAbsenceRequest
from .repository import AbsenceRepository
from .status import Approver, apply_decision

logger = logging.getLogger(__name__)


class AbsenceService:
    """Use cases: submit absence requests and resolve the mentor/parent approvals."""

    def __init__(
        self,
        requests: AbsenceRepository,
        users: UserDirectory,
        *,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._requests = requests
        self._users = users
        self._clock = clock

    def submit(
        self,
        *,
        current_role: Role,
        student_id: int,
        absence_date: date,
        absence_type: str,
        reason_text: str,
        start_at: Optional[datetime] = None,
        end_at: Optional[datetime] = None,
        evidence_url: Optional[str] = None,
    ) -> AbsenceRequest:
        may_submit_absence(current_role).enforce()

        type_ = require_enum(absence_type, AbsenceType, "type")
        reason = require_non_empty(reason_text, "reasonText")
        if not isinstance(absence_date, date):
            raise ValidationError("date is required")
        if start_at and end_at and end_at <= start_at:
            raise ValidationError("endAt must be after startAt")

        request = self._requests.create(
            NewAbsenceRequest(
                student_id=int(student_id),
                absence_date=absence_date,
                type=type_,
                reason_text=reason,
                start_at=start_at,
                end_at=end_at,
                evidence_url=optional_text(evidence_url),
            )
        )
        logger.info("absence request %s submitted by student %s", request.request_id, student_id)
        return request

    def decide(
        self,
        *,
        request_id: int,
        acting_user_id: int,
        acting_role: Role,
        action: DecisionAction,
        comment: Optional[str] = None,
    ) -> AbsenceRequest:
        request = self._requests.get_by_id(int(request_id))
        if not request:
            raise NotFoundError("Request not found")

        ctx = AbsenceDecisionContext(
            acting_user_id=int(acting_user_id),
            student_id=request.student_id,
            assigned_mentor_id=self._users.get_assigned_mentor_id,
            parent_linked=self._users.is_parent_linked,
        )
        access = may_decide_absence(acting_role, ctx)
        if not access.allowed:
            logger.warning(
                "absence request %s: %s %s denied (%s)",
                request_id, acting_role.value, acting_user_id, access.reason,
            )
        access.enforce()

        approver = Approver.for_role(acting_role)
        note = optional_text(comment)
        now = self._clock()

        def resolve(current: AbsenceRequest) -> AbsenceRequest:
            return apply_decision(current, approver=approver, action=action, comment=note, now=now)

        updated = self._requests.decide(request_id=int(request_id), resolve=resolve)
        if updated is None:
            raise NotFoundError("Request not found")

        logger.info(
            "absence request %s: %s %s -> status %s",
            request_id, approver.value, action.value, updated.status.value,
        )
        return updated

    def approve(self, *, request_id: int, acting_user_id: int, acting_role: Role, comment: Optional[str] = None) -> AbsenceRequest:
        return self.decide(
            request_id=request_id,
            acting_user_id=acting_user_id,
            acting_role=acting_role,
            action=DecisionAction.APPROVE,
            comment=comment,
        )

    def reject(self, *, request_id: int, acting_user_id: int, acting_role: Role, comment: Optional[str] = None) -> AbsenceRequest:
        return self.decide(
            request_id=request_id,
            acting_user_id=acting_user_id,
            acting_role=acting_role,
            action=DecisionAction.REJECT,
            comment=comment,
        )

    def list_requests(
        self,
        *,
        caller_id: int,
        caller_role: Role,
        student_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> Sequence[AbsenceRequest]:
        status_filter = require_enum(status, AbsenceStatus, "status") if status else None
        student_ids = self._visible_student_ids(caller_id=int(caller_id), caller_role=caller_role, student_id=student_id)
        limit = DEFAULT_ADMIN_LIST_LIMIT if caller_role == Role.ADMIN else DEFAULT_LIST_LIMIT
        return self._requests.list_requests(student_ids=student_ids, status=status_filter, limit=limit)

    def _visible_student_ids(self, *, caller_id: int, caller_role: Role, student_id: Optional[int]) -> Optional[list[int]]:
        """Student ids the caller may list; ``None`` means all students."""
        if caller_role == Role.STUDENT:
            return [caller_id]

        if caller_role == Role.ADMIN:
            return [int(student_id)] if student_id is not None else None

        if caller_role == Role.PARENT:
            allowed = list(self._users.list_linked_student_ids(caller_id))
        elif caller_role == Role.MENTOR:
            allowed = list(self._users.list_assigned_student_ids(caller_id))
        else:
            deny("Not authorized").enforce()

        if student_id is None:
            return allowed
        if int(student_id) not in allowed:
            deny("Not authorized").enforce()
        return [int(student_id)]
