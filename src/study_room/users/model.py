from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.enums import Role, UserStatus


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: Plain data object; the directory repository owns all DB access.
    """

    user_id: int
    full_name: str
    email: str
    role: Role
    status: UserStatus = UserStatus.ACTIVE
    assigned_mentor_id: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE


@dataclass(frozen=True)
class MentorListing:
    """An active mentor together with the public part of their profile."""

    user_id: int
    full_name: str
    email: str
    university: Optional[str] = None
    major: Optional[str] = None
    bio: Optional[str] = None
    subjects: tuple[str, ...] = field(default_factory=tuple)
    rating_avg: Optional[float] = None
