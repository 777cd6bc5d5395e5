from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from app.models import Company


@dataclass(frozen=True)
class Principal:
    user_id: int
    email: str


@dataclass(frozen=True)
class Scope:
    principal_id: int
    email: str
    company_id: int | None = None


def _parse_company_hint(raw) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def earliest_company(user_id: int) -> Company | None:
    return (
        Company.query.filter_by(owner_id=user_id)
        .order_by(Company.created_at.asc(), Company.id.asc())
        .first()
    )


def resolve_scope(principal: Principal, requested_company_hint=None) -> Scope:
    """
    Pick the active company for this request.

    A hint naming one of the principal's companies wins. Anything else falls
    back to the principal's earliest company, and a principal without
    companies gets an unscoped Scope so that records created before companies
    existed stay reachable.
    """
    company_id = _parse_company_hint(requested_company_hint)
    if company_id is not None:
        company = Company.query.filter_by(
            id=company_id, owner_id=principal.user_id
        ).first()
        if company:
            return Scope(principal.user_id, principal.email, company.id)
        current_app.logger.warning(
            "Ignoring company hint %r for user %s",
            requested_company_hint,
            principal.user_id,
        )
    elif requested_company_hint not in (None, ""):
        current_app.logger.warning(
            "Ignoring malformed company hint %r for user %s",
            requested_company_hint,
            principal.user_id,
        )

    company = earliest_company(principal.user_id)
    return Scope(
        principal.user_id, principal.email, company.id if company else None
    )
