from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str, field_name: str = "date") -> date:
    """Parse a YYYY-MM-DD string (a full ISO timestamp is accepted too)."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    v = (value or "").strip() if isinstance(value, str) else ""
    if not v:
        raise ValidationError(f"{field_name} is required")
    # A timestamp keeps its calendar date as written, without shifting to UTC.
    day, sep, _ = v.partition("T")
    try:
        if sep:
            datetime.fromisoformat(v[:-1] + "+00:00" if v.endswith("Z") else v)
        return date.fromisoformat(day)
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")


def parse_iso_datetime(value: str, field_name: str) -> datetime:
    """Parse an ISO-8601 timestamp into a naive UTC datetime.

    Offsets (including a trailing ``Z``) are converted to UTC; naive input is
    taken to already be UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        v = (value or "").strip() if isinstance(value, str) else ""
        if not v:
            raise ValidationError(f"{field_name} is required")
        if v.endswith("Z"):
            v = v[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(v)
        except ValueError:
            raise ValidationError(f"{field_name} must be an ISO-8601 timestamp")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_optional_datetime(value: Optional[str], field_name: str) -> Optional[datetime]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_iso_datetime(value, field_name)


def utc_now() -> datetime:
    """Current UTC time as a naive datetime.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.replace(microsecond=0).isoformat() + "Z"
    return value.isoformat()
