from flask import jsonify

from app.api import api_bp
from app.api.helpers import current_scope, json_payload, require_text
from app.extensions import db
from app.models import Bookmark, Category, CategoryFolder, Tag
from app.services.authorization import (
    get_owned_bookmark_or_404,
    get_owned_or_404,
    scoped_query,
)
from app.services.common import clean_text, parse_id_list
from app.services.errors import Conflict
from app.services.security import api_auth_required


def _name_conflict(kind: str, name: str) -> Conflict:
    return Conflict(
        f'A {kind} named "{name}" already exists. Please choose a different name.'
    )


def _folder_for_category(scope, folder_id):
    if folder_id is None:
        return None
    return get_owned_or_404(scope, CategoryFolder, folder_id, "category folder")


@api_bp.route("/categories", methods=["GET"])
@api_auth_required
def categories_list():
    items = scoped_query(Category, current_scope()).order_by(Category.name.asc()).all()
    return jsonify({"items": [item.as_dict() for item in items]})


@api_bp.route("/categories", methods=["POST"])
@api_auth_required
def categories_create():
    scope = current_scope()
    payload = json_payload()
    name = require_text(payload, "name")
    if Category.query.filter_by(user_id=scope.principal_id, name=name).first():
        raise _name_conflict("category", name)

    folder = _folder_for_category(scope, payload.get("folder_id"))
    category = Category(
        user_id=scope.principal_id,
        company_id=scope.company_id,
        folder_id=folder.id if folder else None,
        name=name,
        description=clean_text(payload.get("description"), "description"),
        color=clean_text(payload.get("color"), "color") or "#3B82F6",
        icon=clean_text(payload.get("icon"), "icon") or "folder",
    )
    db.session.add(category)
    db.session.commit()
    return jsonify(category.as_dict()), 201


@api_bp.route("/categories/<int:category_id>", methods=["PATCH"])
@api_auth_required
def categories_update(category_id: int):
    scope = current_scope()
    category = get_owned_or_404(scope, Category, category_id, "category")
    payload = json_payload()

    name = clean_text(payload.get("name"), "name")
    if name and name != category.name:
        duplicate = (
            Category.query.filter_by(user_id=scope.principal_id, name=name)
            .filter(Category.id != category.id)
            .first()
        )
        if duplicate:
            raise _name_conflict("category", name)
        category.name = name
    if "description" in payload:
        category.description = clean_text(payload.get("description"), "description")
    for field in ["color", "icon"]:
        value = clean_text(payload.get(field), field)
        if value:
            setattr(category, field, value)
    if "folder_id" in payload:
        folder = _folder_for_category(scope, payload.get("folder_id"))
        category.folder_id = folder.id if folder else None
    db.session.commit()
    return jsonify(category.as_dict())


@api_bp.route("/categories/<int:category_id>", methods=["DELETE"])
@api_auth_required
def categories_delete(category_id: int):
    category = get_owned_or_404(current_scope(), Category, category_id, "category")
    category.bookmarks.clear()
    db.session.delete(category)
    db.session.commit()
    return jsonify({"status": "deleted"})


@api_bp.route("/categories/<int:category_id>/assign", methods=["POST"])
@api_auth_required
def categories_assign(category_id: int):
    scope = current_scope()
    category = get_owned_or_404(scope, Category, category_id, "category")
    payload = json_payload()
    bookmark_ids = parse_id_list(payload.get("bookmark_ids"), "bookmark_ids")

    bookmarks: list[Bookmark] = [
        get_owned_bookmark_or_404(scope, bookmark_id) for bookmark_id in bookmark_ids
    ]
    assigned = 0
    for bookmark in bookmarks:
        if category not in bookmark.categories:
            bookmark.categories.append(category)
            assigned += 1
    db.session.commit()
    return jsonify({"status": "assigned", "assigned": assigned, "category": category.as_dict()})


@api_bp.route("/categories/folders", methods=["GET"])
@api_auth_required
def category_folders_list():
    scope = current_scope()
    items = (
        CategoryFolder.query.filter_by(user_id=scope.principal_id)
        .order_by(CategoryFolder.created_at.desc(), CategoryFolder.id.desc())
        .all()
    )
    return jsonify({"items": [item.as_dict() for item in items]})


@api_bp.route("/categories/folders", methods=["POST"])
@api_auth_required
def category_folders_create():
    scope = current_scope()
    payload = json_payload()
    name = require_text(payload, "name", "folder name")
    if CategoryFolder.query.filter_by(user_id=scope.principal_id, name=name).first():
        raise _name_conflict("folder", name)

    folder = CategoryFolder(user_id=scope.principal_id, name=name)
    db.session.add(folder)
    db.session.commit()
    return jsonify(folder.as_dict()), 201


@api_bp.route("/categories/folders/<int:folder_id>", methods=["PATCH"])
@api_auth_required
def category_folders_update(folder_id: int):
    scope = current_scope()
    folder = get_owned_or_404(scope, CategoryFolder, folder_id, "category folder")
    payload = json_payload()
    name = clean_text(payload.get("name"), "name")
    if name and name != folder.name:
        if CategoryFolder.query.filter_by(user_id=scope.principal_id, name=name).first():
            raise _name_conflict("folder", name)
        folder.name = name
    db.session.commit()
    return jsonify(folder.as_dict())


@api_bp.route("/categories/folders/<int:folder_id>", methods=["DELETE"])
@api_auth_required
def category_folders_delete(folder_id: int):
    folder = get_owned_or_404(
        current_scope(), CategoryFolder, folder_id, "category folder"
    )
    for category in folder.categories:
        category.folder_id = None
    db.session.delete(folder)
    db.session.commit()
    return jsonify({"status": "deleted"})


@api_bp.route("/tags", methods=["GET"])
@api_auth_required
def tags_list():
    items = scoped_query(Tag, current_scope()).order_by(Tag.name.asc()).all()
    return jsonify({"items": [item.as_dict() for item in items]})


def _find_tag_named(scope, name: str, exclude_id=None):
    query = Tag.query.filter_by(
        user_id=scope.principal_id, company_id=scope.company_id, name=name
    )
    if exclude_id is not None:
        query = query.filter(Tag.id != exclude_id)
    return query.first()


@api_bp.route("/tags", methods=["POST"])
@api_auth_required
def tags_create():
    scope = current_scope()
    payload = json_payload()
    name = require_text(payload, "name")
    if _find_tag_named(scope, name):
        raise _name_conflict("tag", name)

    tag = Tag(
        user_id=scope.principal_id,
        company_id=scope.company_id,
        name=name,
        color=clean_text(payload.get("color"), "color") or "#10B981",
    )
    db.session.add(tag)
    db.session.commit()
    return jsonify(tag.as_dict()), 201


@api_bp.route("/tags/<int:tag_id>", methods=["PATCH"])
@api_auth_required
def tags_update(tag_id: int):
    scope = current_scope()
    tag = get_owned_or_404(scope, Tag, tag_id, "tag")
    payload = json_payload()
    name = clean_text(payload.get("name"), "name")
    if name and name != tag.name:
        if _find_tag_named(scope, name, exclude_id=tag.id):
            raise _name_conflict("tag", name)
        tag.name = name
    color = clean_text(payload.get("color"), "color")
    if color:
        tag.color = color
    db.session.commit()
    return jsonify(tag.as_dict())


@api_bp.route("/tags/<int:tag_id>", methods=["DELETE"])
@api_auth_required
def tags_delete(tag_id: int):
    tag = get_owned_or_404(current_scope(), Tag, tag_id, "tag")
    tag.bookmarks.clear()
    db.session.delete(tag)
    db.session.commit()
    return jsonify({"status": "deleted"})
