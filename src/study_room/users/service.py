from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence

from .model import MentorListing, User
from .repository import UserDirectory


class MentorDirectoryService:
    """Use case: browse mentors available for Q&A bookings."""

    def __init__(self, users: UserDirectory):
        self._users = users

    def list_mentors(self, *, subject: Optional[str] = None) -> Sequence[MentorListing]:
        # Subject codes match exactly, as stored on the profile.
        mentors = list(self._users.list_active_mentors())
        wanted = (subject or "").strip()
        if wanted:
            mentors = [m for m in mentors if wanted in m.subjects]
        return mentors


def users_by_id(users: UserDirectory, user_ids: Iterable[int]) -> Dict[int, User]:
    """Resolve each distinct id once; unknown ids are left out."""
    found: Dict[int, User] = {}
    for user_id in {int(u) for u in user_ids}:
        user = users.get_by_id(user_id)
        if user is not None:
            found[user_id] = user
    return found
