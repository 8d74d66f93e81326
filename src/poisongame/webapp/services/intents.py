"""Signed start intents.

Starting a match needs an authorization from both players scoped to
(session_id, their wager). The first player obtains a signed intent and
hands it to the opponent out of band; the opponent presents it together
with their own wager when starting the match.
"""

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from poisongame.engine.auth import Authorization

INTENT_SALT = "poisongame-start-intent"


class IntentError(ValueError):
    """Raised for a tampered, malformed or expired start intent."""


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=INTENT_SALT)


def sign_intent(player: str, session_id: int, wager: int) -> str:
    """Sign ``player``'s approval of starting ``session_id`` with ``wager``."""
    return _serializer().dumps({"player": player, "session_id": session_id, "wager": wager})


def read_intent(token: str, max_age: int | None = None) -> Authorization:
    """Verify an intent token and return the authorization it carries.

    Raises:
        IntentError: If the signature is invalid, the token expired, or the
            payload is malformed.
    """
    if max_age is None:
        max_age = current_app.config["INTENT_MAX_AGE"]
    try:
        payload = _serializer().loads(token, max_age=max_age)
    except SignatureExpired:
        raise IntentError("Start intent has expired") from None
    except BadSignature:
        raise IntentError("Start intent signature is invalid") from None

    try:
        return Authorization(
            str(payload["player"]),
            (int(payload["session_id"]), int(payload["wager"])),
        )
    except (KeyError, TypeError, ValueError):
        raise IntentError("Start intent payload is malformed") from None
