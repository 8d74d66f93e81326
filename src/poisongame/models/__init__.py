"""Poison Game models.

This module exports the core data structures for the game.
"""

from .board import Board
from .match import (
    BOARD_SIZE,
    COMMITMENT_BYTES,
    MATCH_TTL_SECONDS,
    POISON_COUNT,
    SESSION_ID_MAX,
    SHIELD_COUNT,
    ZERO_COMMITMENT,
    Match,
    Outcome,
    Phase,
    RevealedTile,
    Seat,
    TileType,
    parse_commitment,
)

__all__ = [
    # Enums
    "TileType",
    "Phase",
    "Seat",
    "Outcome",
    # Models
    "Match",
    "RevealedTile",
    "Board",
    # Functions
    "parse_commitment",
    # Constants
    "BOARD_SIZE",
    "POISON_COUNT",
    "SHIELD_COUNT",
    "COMMITMENT_BYTES",
    "ZERO_COMMITMENT",
    "SESSION_ID_MAX",
    "MATCH_TTL_SECONDS",
]
