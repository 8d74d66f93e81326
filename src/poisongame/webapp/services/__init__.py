"""Services for the webapp."""

from .engine_service import get_engine, get_escrow
from .intents import IntentError, read_intent, sign_intent

__all__ = ["get_engine", "get_escrow", "IntentError", "read_intent", "sign_intent"]
