from flask import Blueprint

api_bp = Blueprint("api", __name__, url_prefix="/api/v1")

from app.api import (  # noqa: E402,F401
    analytics,
    bookmarks,
    companies,
    notifications,
    routes,
    shares,
    taxonomy,
    tools,
)
