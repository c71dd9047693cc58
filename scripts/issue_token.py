"""Mint a bearer token for a user id, e.g. one printed by seed_db.py.

Usage: python scripts/issue_token.py <user_id> <STUDENT|PARENT|MENTOR|ADMIN>
"""

from __future__ import annotations

import importlib
import sys

from dotenv import load_dotenv

from study_room.auth.tokens import issue_access_token
from study_room.config import get_settings_module
from study_room.core.enums import Role


def main(argv: list[str]) -> int:
    if len(argv) != 2:
        print(__doc__.strip(), file=sys.stderr)
        return 2

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    token = issue_access_token(
        user_id=int(argv[0]),
        role=Role(argv[1].upper()),
        secret=settings.JWT_SECRET,
        algorithm=getattr(settings, "JWT_ALGORITHM", "HS256"),
        days=int(getattr(settings, "ACCESS_TOKEN_DAYS", 7)),
    )
    print(token)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
