"""Deployment administration routes."""

import base64

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from ..services.engine_service import get_engine

bp = Blueprint("admin", __name__, url_prefix="/admin")


@bp.route("/verification-key", methods=["GET"])
def verification_key_status():
    """Whether a verification key is configured. Open to everyone."""
    return jsonify({"configured": get_engine().has_verification_key()})


@bp.route("/verification-key", methods=["PUT"])
@login_required
def set_verification_key():
    """Install or rotate the verification key (base64). Admin only."""
    payload = request.get_json(silent=True) or {}
    if "key" not in payload:
        raise ValueError("Missing field: key")
    key = base64.b64decode(str(payload["key"]), validate=True)

    get_engine().set_verification_key(current_user.call_context(), current_user.player, key)
    return jsonify({"configured": True})
