from flask import g, request

from app.services.errors import ValidationFailure


def json_payload() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        if request.get_data(cache=True):
            raise ValidationFailure("request body must be valid JSON")
        return {}
    if not isinstance(payload, dict):
        raise ValidationFailure("request body must be a JSON object")
    return payload


def current_scope():
    return g.scope


def require_text(payload: dict, field: str, label: str | None = None) -> str:
    value = payload.get(field)
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        raise ValidationFailure(f"{label or field} is required")
    return text
