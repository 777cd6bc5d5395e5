from flask import current_app, jsonify

from app.api import api_bp
from app.api.helpers import current_scope, json_payload, require_text
from app.extensions import db
from app.models import Bookmark, BookmarkComment, BookmarkShare, User, utcnow
from app.services.authorization import (
    PERMISSION_COMMENT,
    PERMISSION_EDIT,
    PERMISSION_LEVELS,
    PERMISSION_VIEW,
    get_owned_bookmark_or_404,
    get_shared_bookmark_or_404,
    share_is_active,
)
from app.services.common import clean_text, parse_choice, parse_datetime
from app.services.errors import Conflict, NotFoundInScope, ValidationFailure
from app.services.security import api_auth_required


SHARED_OPTIONAL_FIELDS = ("description", "notes", "favicon")


def _share_for_bookmark(bookmark: Bookmark, share_id: int) -> BookmarkShare:
    share = BookmarkShare.query.filter_by(id=share_id, bookmark_id=bookmark.id).first()
    if share is None:
        raise NotFoundInScope("share")
    return share


def _share_payload(share: BookmarkShare) -> dict:
    payload = share.as_dict()
    payload["shared_with"] = share.shared_with.as_public_dict()
    payload["is_active"] = share_is_active(share)
    return payload


@api_bp.route("/bookmark-share/<int:bookmark_id>", methods=["GET"])
@api_auth_required
def shares_list(bookmark_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    shares = (
        BookmarkShare.query.filter_by(bookmark_id=bookmark.id)
        .order_by(BookmarkShare.created_at.desc(), BookmarkShare.id.desc())
        .all()
    )
    return jsonify({"items": [_share_payload(share) for share in shares]})


@api_bp.route("/bookmark-share/<int:bookmark_id>", methods=["POST"])
@api_auth_required
def shares_create(bookmark_id: int):
    scope = current_scope()
    bookmark = get_owned_bookmark_or_404(scope, bookmark_id)
    payload = json_payload()
    email = require_text(payload, "shared_with_email").lower()

    recipient = User.query.filter_by(email=email).first()
    if recipient is None or not recipient.is_active:
        raise NotFoundInScope("user")
    if recipient.id == scope.principal_id:
        raise ValidationFailure("cannot share a bookmark with yourself")
    if BookmarkShare.query.filter_by(
        bookmark_id=bookmark.id, shared_with_id=recipient.id
    ).first():
        raise Conflict("bookmark already shared with this user")

    share = BookmarkShare(
        bookmark_id=bookmark.id,
        owner_id=scope.principal_id,
        shared_with_id=recipient.id,
        permission=parse_choice(
            payload.get("permission"),
            "permission",
            PERMISSION_LEVELS,
            default=PERMISSION_VIEW,
        ),
        message=clean_text(payload.get("message"), "message"),
        expires_at=parse_datetime(payload.get("expires_at"), "expires_at"),
    )
    db.session.add(share)
    db.session.commit()
    current_app.logger.info(
        "Bookmark %s shared by user %s with user %s (%s)",
        bookmark.id,
        scope.principal_id,
        recipient.id,
        share.permission,
    )
    return jsonify(_share_payload(share)), 201


@api_bp.route("/bookmark-share/<int:bookmark_id>/<int:share_id>", methods=["PATCH"])
@api_auth_required
def shares_update(bookmark_id: int, share_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    share = _share_for_bookmark(bookmark, share_id)
    payload = json_payload()

    if "permission" in payload:
        share.permission = parse_choice(
            payload.get("permission"),
            "permission",
            PERMISSION_LEVELS,
            default=share.permission,
        )
    if "message" in payload:
        share.message = clean_text(payload.get("message"), "message")
    if "expires_at" in payload:
        share.expires_at = parse_datetime(payload.get("expires_at"), "expires_at")
    db.session.commit()
    return jsonify(_share_payload(share))


@api_bp.route("/bookmark-share/<int:bookmark_id>/<int:share_id>", methods=["DELETE"])
@api_auth_required
def shares_delete(bookmark_id: int, share_id: int):
    bookmark = get_owned_bookmark_or_404(current_scope(), bookmark_id)
    share = _share_for_bookmark(bookmark, share_id)
    db.session.delete(share)
    db.session.commit()
    return jsonify({"status": "deleted"})


@api_bp.route("/bookmark-share/shared-with-me", methods=["GET"])
@api_auth_required
def shares_shared_with_me():
    scope = current_scope()
    now = utcnow()
    shares = (
        BookmarkShare.query.filter_by(shared_with_id=scope.principal_id)
        .order_by(BookmarkShare.created_at.desc(), BookmarkShare.id.desc())
        .all()
    )
    items = []
    for share in shares:
        if not share_is_active(share, now):
            continue
        payload = share.as_dict()
        payload["bookmark"] = share.bookmark.as_dict()
        payload["owner"] = share.owner.as_public_dict()
        items.append(payload)
    return jsonify({"items": items})


def _shared_view(bookmark: Bookmark, share) -> dict:
    payload = bookmark.as_dict()
    payload["permission"] = share.permission if share else "OWNER"
    return payload


@api_bp.route("/shared/<int:bookmark_id>", methods=["GET"])
@api_auth_required
def shared_get(bookmark_id: int):
    bookmark, share = get_shared_bookmark_or_404(
        current_scope(), bookmark_id, PERMISSION_VIEW
    )
    return jsonify(_shared_view(bookmark, share))


@api_bp.route("/shared/<int:bookmark_id>", methods=["PATCH"])
@api_auth_required
def shared_update(bookmark_id: int):
    bookmark, share = get_shared_bookmark_or_404(
        current_scope(), bookmark_id, PERMISSION_EDIT
    )
    payload = json_payload()
    if "title" in payload:
        bookmark.title = require_text(payload, "title")
    for field in SHARED_OPTIONAL_FIELDS:
        if field in payload:
            setattr(bookmark, field, clean_text(payload.get(field), field))
    db.session.commit()
    return jsonify(_shared_view(bookmark, share))


@api_bp.route("/shared/<int:bookmark_id>/comments", methods=["GET"])
@api_auth_required
def shared_comments_list(bookmark_id: int):
    bookmark, _share = get_shared_bookmark_or_404(
        current_scope(), bookmark_id, PERMISSION_VIEW
    )
    comments = (
        BookmarkComment.query.filter_by(bookmark_id=bookmark.id, is_resolved=False)
        .order_by(BookmarkComment.is_pinned.desc(), BookmarkComment.created_at.desc())
        .all()
    )
    return jsonify({"items": [comment.as_dict() for comment in comments]})


@api_bp.route("/shared/<int:bookmark_id>/comments", methods=["POST"])
@api_auth_required
def shared_comments_create(bookmark_id: int):
    scope = current_scope()
    bookmark, _share = get_shared_bookmark_or_404(
        scope, bookmark_id, PERMISSION_COMMENT
    )
    payload = json_payload()
    comment = BookmarkComment(
        bookmark_id=bookmark.id,
        author_id=scope.principal_id,
        content=require_text(payload, "content"),
    )
    db.session.add(comment)
    db.session.commit()
    return jsonify(comment.as_dict()), 201
