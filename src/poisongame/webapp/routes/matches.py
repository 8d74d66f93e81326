"""Match routes - start, commit, attack, respond.

The logged-in username is the player identity. Each request presents a
single authorization for that identity; starting a match additionally
presents the opponent's signed start intent.
"""

import base64

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from poisongame.engine.auth import CallContext
from poisongame.models.match import Match

from ..services.engine_service import get_engine
from ..services.intents import read_intent, sign_intent

bp = Blueprint("matches", __name__, url_prefix="/matches")


def _payload() -> dict:
    return request.get_json(silent=True) or {}


def _require(payload: dict, key: str):
    if key not in payload:
        raise ValueError(f"Missing field: {key}")
    return payload[key]


def _require_int(payload: dict, key: str) -> int:
    value = _require(payload, key)
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Field {key} must be an integer")
    return value


def match_to_json(match: Match) -> dict:
    """Public view of a match record."""
    data = match.model_dump(mode="json")
    data["winner"] = match.winner
    return data


@bp.route("/intents", methods=["POST"])
@login_required
def create_intent():
    """Sign the caller's approval to start a session with a given wager."""
    payload = _payload()
    session_id = _require_int(payload, "session_id")
    wager = _require_int(payload, "wager")
    token = sign_intent(current_user.player, session_id, wager)
    return jsonify({
        "intent": token,
        "player": current_user.player,
        "session_id": session_id,
        "wager": wager,
    }), 201


@bp.route("", methods=["POST"])
@login_required
def start():
    """Start a match against the signer of ``intent``. The caller is player B."""
    payload = _payload()
    intent = read_intent(str(_require(payload, "intent")))
    wager = _require_int(payload, "wager")
    session_id, wager_a = intent.args

    ctx = CallContext.from_authorizations([
        intent,
        current_user.authorize(session_id, wager),
    ])
    match = get_engine().start_match(
        ctx, session_id, intent.address, current_user.player, wager_a, wager
    )
    return jsonify(match_to_json(match)), 201


@bp.route("/<int:session_id>")
@login_required
def show(session_id: int):
    """Current state of a match."""
    return jsonify(match_to_json(get_engine().get_match(session_id)))


@bp.route("/<int:session_id>/commit", methods=["POST"])
@login_required
def commit(session_id: int):
    """Commit the caller's board (hex commitment)."""
    commitment = str(_require(_payload(), "commitment"))
    match = get_engine().commit_board(current_user.call_context(), session_id, current_user.player, commitment)
    return jsonify(match_to_json(match))


@bp.route("/<int:session_id>/attack", methods=["POST"])
@login_required
def attack(session_id: int):
    """Attack a tile of the opponent's board."""
    tile_index = _require_int(_payload(), "tile_index")
    match = get_engine().attack(current_user.call_context(), session_id, current_user.player, tile_index)
    return jsonify(match_to_json(match))


@bp.route("/<int:session_id>/respond", methods=["POST"])
@login_required
def respond(session_id: int):
    """Answer the pending attack with a tile type and base64 proof."""
    payload = _payload()
    tile_type = _require_int(payload, "tile_type")
    proof = base64.b64decode(str(_require(payload, "proof")), validate=True)
    match = get_engine().respond_to_attack(
        current_user.call_context(), session_id, current_user.player, tile_type, proof
    )
    return jsonify(match_to_json(match))
