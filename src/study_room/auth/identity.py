from __future__ import annotations

from functools import wraps

from flask import current_app, g, request

from ..core.constants import BEARER_PREFIX
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ForbiddenError
from .tokens import CallerIdentity, decode_access_token


def _identity_from_request() -> CallerIdentity:
    header = request.headers.get("Authorization", "")
    if not header.startswith(BEARER_PREFIX):
        raise AuthenticationError("Unauthorized")
    token = header[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationError("Unauthorized")
    return decode_access_token(
        token,
        secret=current_app.config["JWT_SECRET"],
        algorithm=current_app.config.get("JWT_ALGORITHM", "HS256"),
    )


def require_identity(*roles: Role):
    """Authenticate the bearer token and, if ``roles`` are given, restrict to them.

    The caller is available to the view as ``flask.g.identity``.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            identity = _identity_from_request()
            if roles and identity.role not in roles:
                raise ForbiddenError("Insufficient permissions")
            g.identity = identity
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_identity() -> CallerIdentity:
    return g.identity
