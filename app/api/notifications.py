import re

from flask import current_app, jsonify

from app.api import api_bp
from app.api.helpers import current_scope, json_payload, require_text
from app.extensions import db
from app.models import NotificationHistory, NotificationPreference, NotificationSchedule
from app.services.authorization import get_owned_bookmark_or_404, get_tool_or_404
from app.services.common import clean_text, parse_choice, parse_datetime, to_bool
from app.services.errors import ValidationFailure
from app.services.security import api_auth_required


FREQUENCIES = {"ONCE", "DAILY", "WEEKLY", "MONTHLY"}
CHANNELS = {"app", "email", "push"}
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _parse_time(value, field: str, required: bool = False):
    text = clean_text(value, field)
    if text is None:
        if required:
            raise ValidationFailure(f"{field} is required")
        return None
    if not TIME_PATTERN.match(text):
        raise ValidationFailure(f"{field} must use HH:MM")
    return text


def _parse_channels(value):
    if value is None:
        return ["app"]
    if not isinstance(value, list) or not value:
        raise ValidationFailure("notify_via must be a non-empty list")
    channels = []
    for item in value:
        channel = str(item).strip().lower()
        if channel not in CHANNELS:
            raise ValidationFailure(
                "notify_via entries must be one of: " + ", ".join(sorted(CHANNELS))
            )
        if channel not in channels:
            channels.append(channel)
    return channels


@api_bp.route("/notifications/scheduler/<int:bookmark_id>", methods=["GET"])
@api_auth_required
def schedules_list(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    schedules = (
        NotificationSchedule.query.filter_by(bookmark_id=bookmark.id)
        .order_by(NotificationSchedule.reminder_date.asc(), NotificationSchedule.id.asc())
        .all()
    )
    return jsonify({"items": [schedule.as_dict() for schedule in schedules]})


@api_bp.route("/notifications/scheduler/<int:bookmark_id>", methods=["POST"])
@api_auth_required
def schedules_create(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    payload = json_payload()
    title = require_text(payload, "title")
    reminder_date = parse_datetime(payload.get("reminder_date"), "reminder_date")
    if reminder_date is None:
        raise ValidationFailure("reminder_date is required")

    schedule = NotificationSchedule(
        bookmark_id=bookmark.id,
        title=title,
        description=clean_text(payload.get("description"), "description"),
        reminder_date=reminder_date,
        reminder_time=_parse_time(
            payload.get("reminder_time"), "reminder_time", required=True
        ),
        frequency=parse_choice(
            payload.get("frequency"), "frequency", FREQUENCIES, default="ONCE"
        ),
        notify_via=_parse_channels(payload.get("notify_via")),
        is_active=to_bool(payload.get("is_active"), default=True),
    )
    db.session.add(schedule)
    db.session.commit()
    return jsonify(schedule.as_dict()), 201


@api_bp.route(
    "/notifications/scheduler/<int:bookmark_id>/<int:schedule_id>", methods=["PATCH"]
)
@api_auth_required
def schedules_update(bookmark_id: int, schedule_id: int):
    schedule = get_tool_or_404(
        current_scope(), NotificationSchedule, bookmark_id, schedule_id, "schedule"
    )
    payload = json_payload()

    if "title" in payload:
        schedule.title = require_text(payload, "title")
    if "description" in payload:
        schedule.description = clean_text(payload.get("description"), "description")
    if "reminder_date" in payload:
        reminder_date = parse_datetime(payload.get("reminder_date"), "reminder_date")
        if reminder_date is None:
            raise ValidationFailure("reminder_date is required")
        schedule.reminder_date = reminder_date
    if "reminder_time" in payload:
        schedule.reminder_time = _parse_time(
            payload.get("reminder_time"), "reminder_time", required=True
        )
    if "frequency" in payload:
        schedule.frequency = parse_choice(
            payload.get("frequency"), "frequency", FREQUENCIES, default=schedule.frequency
        )
    if "notify_via" in payload:
        schedule.notify_via = _parse_channels(payload.get("notify_via"))
    if "is_active" in payload:
        schedule.is_active = to_bool(payload.get("is_active"))
    db.session.commit()
    return jsonify(schedule.as_dict())


@api_bp.route(
    "/notifications/scheduler/<int:bookmark_id>/<int:schedule_id>", methods=["DELETE"]
)
@api_auth_required
def schedules_delete(bookmark_id: int, schedule_id: int):
    schedule = get_tool_or_404(
        current_scope(), NotificationSchedule, bookmark_id, schedule_id, "schedule"
    )
    db.session.delete(schedule)
    db.session.commit()
    return jsonify({"status": "deleted"})


@api_bp.route("/notifications/history/<int:bookmark_id>", methods=["GET"])
@api_auth_required
def notification_history(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    rows = (
        NotificationHistory.query.join(NotificationSchedule)
        .filter(NotificationSchedule.bookmark_id == bookmark.id)
        .order_by(NotificationHistory.sent_at.desc(), NotificationHistory.id.desc())
        .limit(current_app.config["NOTIFICATION_HISTORY_LIMIT"])
        .all()
    )
    return jsonify({"items": [row.as_dict() for row in rows]})


def _preference_for(bookmark_id: int) -> NotificationPreference:
    preference = NotificationPreference.query.filter_by(bookmark_id=bookmark_id).first()
    if preference is None:
        preference = NotificationPreference(
            bookmark_id=bookmark_id,
            email_enabled=True,
            app_enabled=True,
            push_enabled=False,
        )
        db.session.add(preference)
    return preference


@api_bp.route("/notifications/preference/<int:bookmark_id>", methods=["GET"])
@api_auth_required
def notification_preference_get(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    preference = _preference_for(bookmark.id)
    db.session.commit()
    return jsonify(preference.as_dict())


@api_bp.route("/notifications/preference/<int:bookmark_id>", methods=["PATCH"])
@api_auth_required
def notification_preference_update(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    payload = json_payload()
    preference = _preference_for(bookmark.id)

    for field in ["email_enabled", "app_enabled", "push_enabled"]:
        if field in payload:
            setattr(preference, field, to_bool(payload.get(field)))
    for field in ["quiet_hours_start", "quiet_hours_end"]:
        if field in payload:
            setattr(preference, field, _parse_time(payload.get(field), field))
    db.session.commit()
    return jsonify(preference.as_dict())
