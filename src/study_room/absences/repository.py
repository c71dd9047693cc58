from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence

from ..core.enums import AbsenceStatus
from .model import AbsenceRequest, NewAbsenceRequest


class AbsenceRepository(Protocol):
    def create(self, new: NewAbsenceRequest) -> AbsenceRequest:
        raise NotImplementedError

    def get_by_id(self, request_id: int) -> Optional[AbsenceRequest]:
        raise NotImplementedError

    def decide(
        self,
        *,
        request_id: int,
        resolve: Callable[[AbsenceRequest], AbsenceRequest],
    ) -> Optional[AbsenceRequest]:
        """Atomically re-read the request, apply ``resolve`` and persist the result.

        The read and the write must be serialized per request id so that
        ``resolve`` always sees the latest decision of the other approver.
        Exceptions raised by ``resolve`` abort the write. Returns ``None`` if
        the request does not exist.
        """

        raise NotImplementedError

    def list_requests(
        self,
        *,
        student_ids: Optional[Sequence[int]] = None,
        status: Optional[AbsenceStatus] = None,
        limit: int = 200,
    ) -> Sequence[AbsenceRequest]:
        """Newest first; ``student_ids=None`` means every student."""

        raise NotImplementedError
