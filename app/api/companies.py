from flask import current_app, g, jsonify

from app.api import api_bp
from app.api.bookmarks import delete_bookmark_tree
from app.api.helpers import current_scope, json_payload, require_text
from app.extensions import db
from app.models import Bookmark, Category, Company, Tag
from app.services.authorization import get_owned_company_or_404
from app.services.common import clean_text, parse_int
from app.services.errors import Conflict, NotFoundInScope, ValidationFailure
from app.services.security import api_auth_required


def _company_counts(company: Company) -> dict:
    return {
        "bookmarks": Bookmark.query.filter_by(company_id=company.id).count(),
        "categories": Category.query.filter_by(company_id=company.id).count(),
        "tags": Tag.query.filter_by(company_id=company.id).count(),
    }


def _ensure_unique_name(owner_id: int, name: str, exclude_id=None) -> None:
    query = Company.query.filter_by(owner_id=owner_id, name=name)
    if exclude_id is not None:
        query = query.filter(Company.id != exclude_id)
    if query.first():
        raise Conflict("a company with this name already exists")


def _set_active_company_cookie(response, company_id: int):
    response.set_cookie(
        current_app.config["ACTIVE_COMPANY_COOKIE"],
        str(company_id),
        max_age=current_app.config["ACTIVE_COMPANY_COOKIE_MAX_AGE"],
        httponly=True,
        secure=current_app.config["ACTIVE_COMPANY_COOKIE_SECURE"],
        samesite="Lax",
    )
    return response


@api_bp.route("/companies", methods=["GET"])
@api_auth_required
def companies_list():
    user = g.api_user
    companies = (
        Company.query.filter_by(owner_id=user.id)
        .order_by(Company.created_at.asc(), Company.id.asc())
        .all()
    )
    return jsonify(
        {"items": [item.as_dict(counts=_company_counts(item)) for item in companies]}
    )


@api_bp.route("/companies", methods=["POST"])
@api_auth_required
def companies_create():
    user = g.api_user
    payload = json_payload()
    name = require_text(payload, "name", "company name")

    existing_count = Company.query.filter_by(owner_id=user.id).count()
    limit = current_app.config["MAX_COMPANIES_PER_USER"]
    if existing_count >= limit:
        raise ValidationFailure(f"company limit reached ({limit} per user)")
    _ensure_unique_name(user.id, name)

    company = Company(
        owner_id=user.id,
        name=name,
        description=clean_text(payload.get("description"), "description"),
        logo=clean_text(payload.get("logo"), "logo"),
    )
    db.session.add(company)
    db.session.commit()
    return jsonify(company.as_dict()), 201


@api_bp.route("/companies/active", methods=["GET"])
@api_auth_required
def companies_active():
    scope = current_scope()
    if scope.company_id is None:
        raise NotFoundInScope("company")
    company = get_owned_company_or_404(scope, scope.company_id)
    return jsonify(company.as_dict())


@api_bp.route("/companies/active", methods=["POST"])
@api_auth_required
def companies_set_active():
    payload = json_payload()
    if payload.get("company_id") in (None, ""):
        raise ValidationFailure("company_id is required")
    company = get_owned_company_or_404(
        current_scope(), parse_int(payload.get("company_id"), "company_id")
    )
    return _set_active_company_cookie(jsonify(company.as_dict()), company.id)


@api_bp.route("/companies/<int:company_id>", methods=["GET"])
@api_auth_required
def companies_get(company_id: int):
    company = get_owned_company_or_404(current_scope(), company_id)
    return jsonify(company.as_dict(counts=_company_counts(company)))


@api_bp.route("/companies/<int:company_id>", methods=["PATCH"])
@api_auth_required
def companies_update(company_id: int):
    company = get_owned_company_or_404(current_scope(), company_id)
    payload = json_payload()

    name = clean_text(payload.get("name"), "name")
    if name and name != company.name:
        _ensure_unique_name(company.owner_id, name, exclude_id=company.id)
        company.name = name
    for field in ["description", "logo"]:
        if field in payload:
            setattr(company, field, clean_text(payload.get(field), field))
    db.session.commit()
    return jsonify(company.as_dict())


@api_bp.route("/companies/<int:company_id>", methods=["DELETE"])
@api_auth_required
def companies_delete(company_id: int):
    company = get_owned_company_or_404(current_scope(), company_id)
    if Company.query.filter_by(owner_id=company.owner_id).count() <= 1:
        raise ValidationFailure("cannot delete your last company")

    for bookmark in Bookmark.query.filter_by(company_id=company.id).all():
        delete_bookmark_tree(bookmark)
    for model in (Category, Tag):
        for row in model.query.filter_by(company_id=company.id).all():
            row.bookmarks.clear()
            db.session.delete(row)
    db.session.delete(company)
    db.session.commit()
    return jsonify({"status": "deleted"})
