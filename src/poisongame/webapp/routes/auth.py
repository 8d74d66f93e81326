"""Authentication routes."""

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required, login_user, logout_user

from ..extensions import db
from ..models.user import User

bp = Blueprint("auth", __name__, url_prefix="/auth")

MIN_PASSWORD_LENGTH = 8


@bp.route("/register", methods=["POST"])
def register():
    """Create an account and log it in."""
    payload = request.get_json(silent=True) or {}
    username = str(payload.get("username", "")).strip()
    password = str(payload.get("password", ""))

    # Validation
    errors = []
    if not username:
        errors.append("Username is required.")
    elif len(username) < 3:
        errors.append("Username must be at least 3 characters.")
    elif len(username) > 64:
        errors.append("Username must be at most 64 characters.")

    if not password:
        errors.append("Password is required.")
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors.append(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")

    if username and User.query.filter_by(username=username).first():
        errors.append("Username already taken.")

    if errors:
        return jsonify({"error": "ValidationError", "code": None, "message": " ".join(errors)}), 400

    user = User(username=username)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()

    login_user(user)
    return jsonify({"username": user.username}), 201


@bp.route("/login", methods=["POST"])
def login():
    """Log in with username and password."""
    payload = request.get_json(silent=True) or {}
    username = str(payload.get("username", "")).strip()
    password = str(payload.get("password", ""))

    user = User.query.filter_by(username=username).first()

    # Use same error message for invalid user vs invalid password
    if user is None or not user.check_password(password):
        return jsonify({"error": "InvalidCredentials", "code": None, "message": "Invalid username or password."}), 401

    # check_password may have rehashed
    db.session.commit()
    login_user(user)
    return jsonify({"username": user.username})


@bp.route("/logout", methods=["POST"])
@login_required
def logout():
    """Log out the current user."""
    username = current_user.username
    logout_user()
    return jsonify({"username": username, "logged_out": True})
