from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import MentorListing, User


class UserDirectory(Protocol):
    """Read-only view of users and the relations between them.

    Note: services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_active_mentor(self, user_id: int) -> Optional[User]:
        """Return the user only if it is a mentor in ACTIVE status."""

        raise NotImplementedError

    def get_assigned_mentor_id(self, student_id: int) -> Optional[int]:
        raise NotImplementedError

    def is_parent_linked(self, parent_id: int, student_id: int) -> bool:
        raise NotImplementedError

    def list_linked_student_ids(self, parent_id: int) -> Sequence[int]:
        raise NotImplementedError

    def list_assigned_student_ids(self, mentor_id: int) -> Sequence[int]:
        raise NotImplementedError

    def list_active_mentors(self) -> Sequence[MentorListing]:
        raise NotImplementedError
