from __future__ import annotations

from flask import request

from ..core.exceptions import ValidationError


def json_body() -> dict:
    """Request JSON as a dict; an absent body counts as ``{}``."""
    if not request.get_data():
        return {}
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
