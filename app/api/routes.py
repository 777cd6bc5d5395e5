from flask import current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from app.api import api_bp
from app.extensions import db
from app.models import ApiToken, User
from app.services.common import clean_text, plain_text
from app.services.errors import ApiError


@api_bp.errorhandler(ApiError)
def handle_api_error(error: ApiError):
    db.session.rollback()
    if error.status_code >= 500:
        current_app.logger.error("API error: %s", error.message)
    return jsonify({"error": error.message}), error.status_code


@api_bp.errorhandler(HTTPException)
def handle_http_error(error: HTTPException):
    return jsonify({"error": error.description}), error.code


@api_bp.errorhandler(SQLAlchemyError)
def handle_database_error(error: SQLAlchemyError):
    db.session.rollback()
    current_app.logger.exception("Database error on %s %s", request.method, request.path)
    return jsonify({"error": "internal server error"}), 500


@api_bp.errorhandler(Exception)
def handle_unexpected_error(error: Exception):
    db.session.rollback()
    current_app.logger.exception(
        "Unhandled error on %s %s", request.method, request.path
    )
    return jsonify({"error": "internal server error"}), 500


@api_bp.route("/health")
def health():
    return jsonify({"status": "ok", "service": "LinkDeck"})


@api_bp.route("/auth/token", methods=["POST"])
def create_token_with_credentials():
    payload = request.get_json(silent=True) or {}
    email = (clean_text(payload.get("email"), "email") or "").lower()
    password = plain_text(payload.get("password"), "password")
    token_name = (
        clean_text(payload.get("token_name"), "token_name") or "LinkDeck API Token"
    )

    user = User.query.filter_by(email=email).first()
    if not user or not user.is_active or not user.check_password(password):
        return jsonify({"error": "invalid credentials"}), 401

    token, token_hash = ApiToken.issue_token()
    row = ApiToken(user_id=user.id, name=token_name, token_hash=token_hash)
    db.session.add(row)
    db.session.commit()
    return jsonify({"token": token, "token_name": token_name, "user_id": user.id})
