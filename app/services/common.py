from __future__ import annotations

from datetime import date, datetime, timezone
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from dateutil import parser as dt_parser

from app.services.errors import ValidationFailure


def normalize_url(url: str) -> str:
    if not url:
        return ""
    parsed = urlparse(url.strip())
    scheme = (parsed.scheme or "https").lower()
    netloc = parsed.netloc.lower()
    path = parsed.path or "/"
    query_items = sorted(parse_qsl(parsed.query, keep_blank_values=True))
    normalized_query = urlencode(query_items)
    return urlunparse((scheme, netloc, path, "", normalized_query, ""))


def to_bool(value, default=False):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def clean_text(value, field: str = "value") -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationFailure(f"{field} must be a string")
    return value.strip() or None


def plain_text(value, field: str) -> str:
    """Unstripped string input such as a password; missing becomes ``""``."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationFailure(f"{field} must be a string")
    return value


def parse_datetime(value, field: str) -> datetime | None:
    if value in (None, ""):
        return None
    try:
        parsed = dt_parser.isoparse(str(value))
    except (ValueError, OverflowError) as exc:
        raise ValidationFailure(f"{field} must be an ISO 8601 date") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_date(value, field: str) -> date | None:
    parsed = parse_datetime(value, field)
    return parsed.date() if parsed else None


def parse_int(value, field: str, minimum: int | None = None) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationFailure(f"{field} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationFailure(f"{field} must be an integer") from exc
    if minimum is not None and number < minimum:
        raise ValidationFailure(f"{field} must be at least {minimum}")
    return number


def parse_id_list(value, field: str) -> list[int]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationFailure(f"{field} must be a list of ids")
    ids: list[int] = []
    for item in value:
        item_id = parse_int(item, field)
        if item_id not in ids:
            ids.append(item_id)
    return ids


def parse_choice(value, field: str, choices, default=None):
    if value in (None, ""):
        return default
    normalized = str(value).strip().upper()
    if normalized not in choices:
        allowed = ", ".join(sorted(choices))
        raise ValidationFailure(f"{field} must be one of: {allowed}")
    return normalized
