from __future__ import annotations

from flask import current_app, jsonify, request

from app.api import api_bp
from app.api.helpers import current_scope, json_payload, require_text
from app.extensions import db
from app.models import (
    Bookmark,
    BookmarkComment,
    BookmarkHistory,
    Category,
    CodeSnippet,
    Habit,
    MediaItem,
    NotificationPreference,
    NotificationSchedule,
    QuickNote,
    Tag,
    TaskList,
    TodoItem,
    WebHighlight,
)
from app.services.authorization import (
    get_owned_bookmark_or_404,
    get_owned_company_or_404,
    get_owned_or_404,
    scoped_query,
)
from app.services.common import (
    clean_text,
    normalize_url,
    parse_choice,
    parse_id_list,
    parse_int,
    to_bool,
)
from app.services.engagement import record_visit, rounded_seconds, seconds_from_payload
from app.services.errors import Conflict, ValidationFailure
from app.services.search import search_bookmarks
from app.services.security import api_auth_required


PRIORITIES = {"LOW", "MEDIUM", "HIGH", "URGENT"}

BOOKMARK_TOOL_MODELS = (
    Habit,
    TaskList,
    TodoItem,
    QuickNote,
    BookmarkComment,
    WebHighlight,
    MediaItem,
    CodeSnippet,
    NotificationSchedule,
    NotificationPreference,
)


def _owned_categories(scope, ids: list[int]) -> list[Category]:
    return [get_owned_or_404(scope, Category, item, "category") for item in ids]


def _owned_tags(scope, ids: list[int]) -> list[Tag]:
    return [get_owned_or_404(scope, Tag, item, "tag") for item in ids]


def _ensure_not_duplicate(scope, normalized_url: str, exclude_id=None) -> None:
    query = scoped_query(Bookmark, scope).filter(
        Bookmark.normalized_url == normalized_url
    )
    if exclude_id is not None:
        query = query.filter(Bookmark.id != exclude_id)
    existing = query.first()
    if existing:
        raise Conflict(
            f'This URL already exists in your bookmarks: "{existing.title}"'
        )


def _with_usage(bookmarks: list[Bookmark]) -> list[dict]:
    total_visits = sum(item.total_visits or 0 for item in bookmarks)
    items = []
    for bookmark in bookmarks:
        payload = bookmark.as_dict()
        payload["usage_percentage"] = (
            (bookmark.total_visits / total_visits) * 100 if total_visits else 0
        )
        items.append(payload)
    return items


def delete_bookmark_tree(bookmark: Bookmark) -> None:
    for model in BOOKMARK_TOOL_MODELS:
        for row in model.query.filter_by(bookmark_id=bookmark.id).all():
            db.session.delete(row)
    bookmark.tags.clear()
    bookmark.categories.clear()
    db.session.delete(bookmark)


@api_bp.route("/bookmarks", methods=["GET"])
@api_auth_required
def bookmarks_list():
    scope = current_scope()
    query = scoped_query(Bookmark, scope)

    category_id = request.args.get("category", type=int)
    if category_id:
        query = query.filter(Bookmark.categories.any(Category.id == category_id))
    tag_id = request.args.get("tag", type=int)
    if tag_id:
        query = query.filter(Bookmark.tags.any(Tag.id == tag_id))
    priority = parse_choice(request.args.get("priority"), "priority", PRIORITIES)
    if priority:
        query = query.filter(Bookmark.priority == priority)

    bookmarks = query.order_by(Bookmark.created_at.desc(), Bookmark.id.desc()).all()
    search = (request.args.get("search") or "").strip()
    if not search:
        return jsonify({"items": _with_usage(bookmarks)})

    ranked = search_bookmarks(
        bookmarks, search, limit=current_app.config["SEARCH_RESULT_LIMIT"]
    )
    items = _with_usage([row["bookmark"] for row in ranked])
    for item, row in zip(items, ranked):
        item["score"] = row["score"]
        item["reasons"] = row["reasons"]
    return jsonify({"items": items})


@api_bp.route("/bookmarks", methods=["POST"])
@api_auth_required
def bookmarks_create():
    scope = current_scope()
    payload = json_payload()
    title = require_text(payload, "title")
    url = require_text(payload, "url")

    company_id = scope.company_id
    if payload.get("company_id") is not None:
        company_id = get_owned_company_or_404(
            scope, parse_int(payload.get("company_id"), "company_id")
        ).id

    normalized = normalize_url(url)
    _ensure_not_duplicate(scope, normalized)
    categories = _owned_categories(
        scope, parse_id_list(payload.get("category_ids"), "category_ids")
    )
    tags = _owned_tags(scope, parse_id_list(payload.get("tag_ids"), "tag_ids"))

    bookmark = Bookmark(
        user_id=scope.principal_id,
        company_id=company_id,
        title=title,
        url=url,
        normalized_url=normalized,
        description=clean_text(payload.get("description"), "description"),
        favicon=clean_text(payload.get("favicon"), "favicon"),
        notes=clean_text(payload.get("notes"), "notes"),
        priority=parse_choice(
            payload.get("priority"), "priority", PRIORITIES, default="MEDIUM"
        ),
        is_favorite=to_bool(payload.get("is_favorite"), default=False),
    )
    bookmark.categories = categories
    bookmark.tags = tags
    bookmark.history.append(
        BookmarkHistory(action="CREATED", details="Bookmark created")
    )
    db.session.add(bookmark)
    db.session.commit()
    return jsonify(bookmark.as_dict()), 201


@api_bp.route("/bookmarks/<int:bookmark_id>", methods=["GET"])
@api_auth_required
def bookmarks_get(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    payload = bookmark.as_dict()
    payload["history"] = [row.as_dict() for row in bookmark.history]
    return jsonify(payload)


@api_bp.route("/bookmarks/<int:bookmark_id>", methods=["PATCH"])
@api_auth_required
def bookmarks_update(bookmark_id: int):
    scope = current_scope()
    bookmark = get_owned_bookmark_or_404(scope, bookmark_id)
    payload = json_payload()

    if "title" in payload:
        bookmark.title = require_text(payload, "title")
    if "url" in payload:
        url = require_text(payload, "url")
        normalized = normalize_url(url)
        if normalized != bookmark.normalized_url:
            _ensure_not_duplicate(scope, normalized, exclude_id=bookmark.id)
        bookmark.url = url
        bookmark.normalized_url = normalized
    for field in ["description", "favicon", "notes"]:
        if field in payload:
            setattr(bookmark, field, clean_text(payload.get(field), field))
    if "priority" in payload:
        bookmark.priority = parse_choice(
            payload.get("priority"), "priority", PRIORITIES, default=bookmark.priority
        )
    if "is_favorite" in payload:
        bookmark.is_favorite = to_bool(payload.get("is_favorite"))
    if "category_ids" in payload:
        bookmark.categories = _owned_categories(
            scope, parse_id_list(payload.get("category_ids"), "category_ids")
        )
    if "tag_ids" in payload:
        bookmark.tags = _owned_tags(
            scope, parse_id_list(payload.get("tag_ids"), "tag_ids")
        )

    bookmark.history.append(
        BookmarkHistory(action="UPDATED", details="Bookmark updated")
    )
    db.session.commit()
    return jsonify(bookmark.as_dict())


@api_bp.route("/bookmarks/<int:bookmark_id>", methods=["DELETE"])
@api_auth_required
def bookmarks_delete(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    delete_bookmark_tree(bookmark)
    db.session.commit()
    return jsonify({"status": "deleted"})


@api_bp.route("/bookmarks/<int:bookmark_id>/track-time", methods=["POST"])
@api_auth_required
def bookmarks_track_time(bookmark_id: int):
    payload = json_payload()
    seconds = seconds_from_payload(payload)
    if seconds is None:
        raise ValidationFailure("invalid time value")

    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    # Not idempotent: every request adds its seconds.
    bookmark.time_spent = (bookmark.time_spent or 0) + rounded_seconds(seconds)
    db.session.commit()
    return jsonify({"status": "tracked", "time_spent": bookmark.time_spent})


@api_bp.route("/bookmarks/<int:bookmark_id>/track-visit", methods=["POST"])
@api_auth_required
def bookmarks_track_visit(bookmark_id: int):
    payload = json_payload()
    extra = payload.get("timeSpent")
    additional = 0
    if isinstance(extra, (int, float)) and not isinstance(extra, bool):
        additional = max(0, int(extra))

    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    record_visit(bookmark, additional)
    db.session.commit()
    return jsonify(
        {
            "status": "tracked",
            "visit_count": bookmark.total_visits,
            "engagement_score": bookmark.engagement_score,
            "time_spent": bookmark.time_spent,
        }
    )
