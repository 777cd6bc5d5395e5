from flask import current_app, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user

from app.auth import auth_bp
from app.extensions import db, login_manager
from app.models import Company, User
from app.services.common import clean_text, plain_text
from app.services.errors import ApiError


DEFAULT_COMPANY_NAME = "Personal"


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"error": "authentication required"}), 401


@auth_bp.errorhandler(ApiError)
def handle_auth_error(error: ApiError):
    db.session.rollback()
    return jsonify({"error": error.message}), error.status_code


@auth_bp.route("/signup", methods=["POST"])
def signup():
    payload = request.get_json(silent=True) or {}
    email = (clean_text(payload.get("email"), "email") or "").lower()
    password = plain_text(payload.get("password"), "password")
    name = clean_text(payload.get("name"), "name") or clean_text(
        payload.get("fullName"), "fullName"
    )

    if not email or not password:
        return jsonify({"error": "email and password are required"}), 400
    if User.query.filter_by(email=email).first():
        return jsonify({"error": "user already exists"}), 409

    user = User(email=email, name=name or email.split("@")[0], is_active=True)
    user.set_password(password)
    db.session.add(user)
    db.session.flush()
    db.session.add(Company(owner_id=user.id, name=DEFAULT_COMPANY_NAME))
    db.session.commit()
    current_app.logger.info("Created user %s with default company", user.id)
    return jsonify({"status": "created", "user": user.as_public_dict()}), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    payload = request.get_json(silent=True) or {}
    email = (clean_text(payload.get("email"), "email") or "").lower()
    password = plain_text(payload.get("password"), "password")

    user = User.query.filter_by(email=email).first()
    if not user or not user.is_active or not user.check_password(password):
        return jsonify({"error": "invalid credentials"}), 401
    login_user(user)
    return jsonify({"status": "logged_in", "user": user.as_public_dict()})


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return jsonify({"status": "logged_out"})


@auth_bp.route("/me", methods=["GET"])
@login_required
def me():
    return jsonify(current_user.as_public_dict())
