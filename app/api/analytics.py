from datetime import timedelta

from flask import jsonify, request

from app.api import api_bp
from app.api.helpers import current_scope
from app.models import Bookmark, DailyAnalytics, utcnow
from app.services.authorization import scoped_query
from app.services.common import parse_int
from app.services.security import api_auth_required


DEFAULT_RANGE_DAYS = 30
MAX_RANGE_DAYS = 365


@api_bp.route("/analytics", methods=["GET"])
@api_auth_required
def analytics_overview():
    scope = current_scope()
    raw_days = request.args.get("days", request.args.get("range"))
    days = parse_int(raw_days, "days", minimum=1) or DEFAULT_RANGE_DAYS
    days = min(days, MAX_RANGE_DAYS)
    start = utcnow().date() - timedelta(days=days)

    rows = (
        DailyAnalytics.query.filter(
            DailyAnalytics.user_id == scope.principal_id,
            DailyAnalytics.date >= start,
        )
        .order_by(DailyAnalytics.date.asc())
        .all()
    )
    bookmarks = scoped_query(Bookmark, scope).all()
    average_engagement = (
        round(sum(item.engagement_score or 0 for item in bookmarks) / len(bookmarks))
        if bookmarks
        else 0
    )
    top = sorted(
        bookmarks, key=lambda item: (item.total_visits or 0, item.id), reverse=True
    )[:5]

    return jsonify(
        {
            "days": days,
            "analytics": [row.as_dict() for row in rows],
            "totals": {
                "total_visits": sum(row.total_visits for row in rows),
                "bookmarks_viewed": sum(row.bookmarks_viewed for row in rows),
                "time_spent": sum(row.time_spent for row in rows),
                "engagement_score": average_engagement,
                "bookmark_count": len(bookmarks),
            },
            "top_bookmarks": [
                {
                    "id": item.id,
                    "title": item.title,
                    "visit_count": item.total_visits,
                    "engagement_score": item.engagement_score,
                }
                for item in top
            ],
        }
    )
