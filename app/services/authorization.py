from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from app.extensions import db
from app.models import (
    Bookmark,
    BookmarkShare,
    Company,
    CommentReply,
    HabitCheckIn,
    NotificationHistory,
    TaskListItem,
    as_utc,
    utcnow,
)
from app.services.errors import Forbidden, NotFoundInScope
from app.services.scope import Scope


PERMISSION_VIEW = "VIEW"
PERMISSION_COMMENT = "COMMENT"
PERMISSION_EDIT = "EDIT"
PERMISSION_LEVELS = {PERMISSION_VIEW: 1, PERMISSION_COMMENT: 2, PERMISSION_EDIT: 3}

DENIED_NOT_FOUND = "not_found"
DENIED_FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class Allowed:
    allowed = True


@dataclass(frozen=True)
class Denied:
    reason: str = DENIED_NOT_FOUND
    allowed = False


ALLOWED = Allowed()


def _parent_bookmark(entity) -> Bookmark | None:
    # Child rows of tool records reach the bookmark through their own parent.
    if isinstance(entity, HabitCheckIn):
        return entity.habit.bookmark if entity.habit else None
    if isinstance(entity, CommentReply):
        return entity.comment.bookmark if entity.comment else None
    if isinstance(entity, NotificationHistory):
        return entity.schedule.bookmark if entity.schedule else None
    if isinstance(entity, TaskListItem):
        return entity.task_list.bookmark if entity.task_list else None
    return getattr(entity, "bookmark", None)


def is_transitively_owned(entity) -> bool:
    if isinstance(entity, (Bookmark, BookmarkShare)):
        return False
    return isinstance(
        entity, (HabitCheckIn, CommentReply, NotificationHistory, TaskListItem)
    ) or hasattr(type(entity), "bookmark_id")


def _company_matches(scope: Scope, entity) -> bool:
    if scope.company_id is None or not hasattr(entity, "company_id"):
        return True
    return entity.company_id == scope.company_id


def share_is_active(share: BookmarkShare, now: datetime | None = None) -> bool:
    expires_at = as_utc(share.expires_at)
    if expires_at is None:
        return True
    return expires_at > (now or utcnow())


def permission_satisfies(granted: str, required: str) -> bool:
    return PERMISSION_LEVELS.get(granted, 0) >= PERMISSION_LEVELS[required]


def authorize_share(
    scope: Scope,
    bookmark: Bookmark,
    share: BookmarkShare | None,
    required: str = PERMISSION_VIEW,
    now: datetime | None = None,
):
    if bookmark.user_id == scope.principal_id:
        return ALLOWED
    if (
        share is None
        or share.bookmark_id != bookmark.id
        or share.shared_with_id != scope.principal_id
    ):
        return Denied(DENIED_NOT_FOUND)
    if not share_is_active(share, now):
        return Denied(DENIED_NOT_FOUND)
    if not permission_satisfies(share.permission, required):
        return Denied(DENIED_FORBIDDEN)
    return ALLOWED


def authorize(scope: Scope, entity, required: str | None = None, now=None):
    """
    Decide whether the scope may act on ``entity``.

    Companies are checked against ``owner_id``, directly owned rows against
    ``user_id`` plus the active company, and bookmark tool rows against the
    owner of their parent bookmark. A share is checked for the ``required``
    permission level.
    """
    if entity is None:
        return Denied(DENIED_NOT_FOUND)

    if isinstance(entity, BookmarkShare):
        return authorize_share(
            scope, entity.bookmark, entity, required or PERMISSION_VIEW, now
        )

    if isinstance(entity, Company):
        if entity.owner_id == scope.principal_id:
            return ALLOWED
        return Denied(DENIED_NOT_FOUND)

    if is_transitively_owned(entity):
        parent = _parent_bookmark(entity)
        if parent is not None and parent.user_id == scope.principal_id:
            return ALLOWED
        return Denied(DENIED_NOT_FOUND)

    if getattr(entity, "user_id", None) != scope.principal_id:
        return Denied(DENIED_NOT_FOUND)
    if not _company_matches(scope, entity):
        return Denied(DENIED_NOT_FOUND)
    return ALLOWED


def enforce(decision, entity_name: str) -> None:
    if decision.allowed:
        return
    if decision.reason == DENIED_FORBIDDEN:
        raise Forbidden(f"insufficient permission for this {entity_name}")
    raise NotFoundInScope(entity_name)


def company_visible(query, model, scope: Scope):
    if scope.company_id is None:
        return query
    return query.filter(model.company_id == scope.company_id)


def scoped_query(model, scope: Scope):
    """Query on a directly owned model limited to what the scope may see."""
    query = model.query.filter(model.user_id == scope.principal_id)
    if hasattr(model, "company_id"):
        query = company_visible(query, model, scope)
    return query


def get_owned_or_404(scope: Scope, model, entity_id, entity_name: str):
    entity = db.session.get(model, entity_id) if entity_id is not None else None
    enforce(authorize(scope, entity), entity_name)
    return entity


def get_owned_company_or_404(scope: Scope, company_id) -> Company:
    return get_owned_or_404(scope, Company, company_id, "company")


def get_owned_bookmark_or_404(scope: Scope, bookmark_id) -> Bookmark:
    return get_owned_or_404(scope, Bookmark, bookmark_id, "bookmark")


def get_tool_or_404(scope: Scope, model, bookmark_id, tool_id, entity_name: str):
    bookmark = get_owned_bookmark_or_404(scope, bookmark_id)
    tool = model.query.filter_by(id=tool_id, bookmark_id=bookmark.id).first()
    enforce(authorize(scope, tool), entity_name)
    return tool


def get_shared_bookmark_or_404(scope: Scope, bookmark_id, required: str):
    """Load a bookmark for its owner or for a share recipient holding ``required``."""
    bookmark = db.session.get(Bookmark, bookmark_id) if bookmark_id is not None else None
    if bookmark is None:
        raise NotFoundInScope("bookmark")
    share = None
    if bookmark.user_id != scope.principal_id:
        share = BookmarkShare.query.filter_by(
            bookmark_id=bookmark.id, shared_with_id=scope.principal_id
        ).first()
    enforce(authorize_share(scope, bookmark, share, required), "bookmark")
    return bookmark, share
