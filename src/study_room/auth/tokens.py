from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from ..core.constants import DEFAULT_ACCESS_TOKEN_DAYS
from ..core.enums import Role
from ..core.exceptions import AuthenticationError


@dataclass(frozen=True)
class CallerIdentity:
    """Who is calling: the only identity facts the handlers rely on."""

    user_id: int
    role: Role


def issue_access_token(
    *,
    user_id: int,
    role: Role,
    secret: str,
    algorithm: str = "HS256",
    days: int = DEFAULT_ACCESS_TOKEN_DAYS,
) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(int(user_id)),
        "role": role.value,
        "iat": now,
        "exp": now + timedelta(days=days),
    }
    return jwt.encode(claims, secret, algorithm=algorithm)


def decode_access_token(token: str, *, secret: str, algorithm: str = "HS256") -> CallerIdentity:
    try:
        claims = jwt.decode(token, secret, algorithms=[algorithm], options={"require": ["sub", "exp"]})
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")

    try:
        return CallerIdentity(user_id=int(claims["sub"]), role=Role(claims.get("role")))
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token")
