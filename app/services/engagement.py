from __future__ import annotations

from datetime import datetime

from app.extensions import db
from app.models import Bookmark, BookmarkHistory, DailyAnalytics, as_utc, utcnow


def seconds_from_payload(payload: dict) -> float | None:
    """Seconds to add, accepting the legacy ``timeSpentMinutes`` field."""
    if "timeSpentSeconds" in payload:
        value = payload.get("timeSpentSeconds")
    elif payload.get("timeSpentMinutes"):
        value = payload.get("timeSpentMinutes")
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = value * 60
    else:
        value = 0
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        return None
    return value


def rounded_seconds(value: float) -> int:
    # Any positive amount counts as at least one second.
    return max(round(value), 1 if value > 0 else 0)


def calculate_engagement_score(
    bookmark: Bookmark, now: datetime | None = None
) -> int:
    now = now or utcnow()
    score = 0

    if bookmark.total_visits >= 1:
        score += min(30, 5 + int(bookmark.total_visits * 1.2))

    last_visited = as_utc(bookmark.last_visited)
    if last_visited:
        days = (now - last_visited).days
        if days <= 0:
            score += 25
        elif days <= 7:
            score += 20
        elif days <= 30:
            score += 15
        elif days <= 90:
            score += 10
        else:
            score += 5

    minutes = (bookmark.time_spent or 0) / 60
    score += min(20, int(minutes * 5))

    if bookmark.categories:
        score += 8
    if bookmark.tags:
        score += 7
    if bookmark.is_favorite:
        score += 5
    if (bookmark.notes or "").strip():
        score += 5

    return min(100, score)


def record_visit(bookmark: Bookmark, additional_seconds: int = 0) -> None:
    """Bump visit counters and the owner's daily analytics row; caller commits."""
    now = utcnow()
    bookmark.total_visits = (bookmark.total_visits or 0) + 1
    bookmark.time_spent = (bookmark.time_spent or 0) + additional_seconds
    bookmark.last_visited = now
    bookmark.engagement_score = calculate_engagement_score(bookmark, now)
    bookmark.history.append(
        BookmarkHistory(
            action="VIEWED",
            details=f"Bookmark viewed (visit #{bookmark.total_visits})",
        )
    )

    minutes = additional_seconds // 60 if additional_seconds > 0 else 1
    today = now.date()
    row = DailyAnalytics.query.filter_by(user_id=bookmark.user_id, date=today).first()
    if row is None:
        row = DailyAnalytics(
            user_id=bookmark.user_id,
            date=today,
            total_visits=0,
            bookmarks_viewed=0,
            time_spent=0,
        )
        db.session.add(row)
    row.total_visits += 1
    row.bookmarks_viewed += 1
    row.time_spent += minutes
