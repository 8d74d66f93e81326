"""Error taxonomy for the Poison Game rule engine.

Every expected failure of a match operation is one of the classes below.
Each carries a stable integer ``code`` so that clients (the web API, the
CLI, remote callers) can round-trip the error without depending on Python
class identity:

    1  MatchNotFound            8  InvalidProof
    2  NotPlayer                9  GameAlreadyEnded
    3  WrongPhase              10  SelfPlay
    4  AlreadyCommitted        11  VerificationKeyNotSet
    5  NotYourTurn             12  VerificationKeyMalformed
    6  TileAlreadyRevealed     13  NotAdmin
    7  InvalidTileIndex

An operation that raises one of these has not changed any stored state.
"""

from __future__ import annotations


class PoisonGameError(Exception):
    """Base class for all match rule violations."""

    code: int = 0
    default_message: str = "Match operation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        """Serialize for API responses."""
        return {"error": self.name, "code": self.code, "message": self.message}


class MatchNotFound(PoisonGameError):
    code = 1
    default_message = "No match exists for this session"


class NotPlayer(PoisonGameError):
    code = 2
    default_message = "Caller is not a participant in this match"


class WrongPhase(PoisonGameError):
    code = 3
    default_message = "Operation not allowed in the current match phase"


class AlreadyCommitted(PoisonGameError):
    code = 4
    default_message = "Player has already committed a board"


class NotYourTurn(PoisonGameError):
    code = 5
    default_message = "It is not this player's turn"


class TileAlreadyRevealed(PoisonGameError):
    code = 6
    default_message = "Tile has already been revealed"


class InvalidTileIndex(PoisonGameError):
    code = 7
    default_message = "Tile index is outside the board"


class InvalidProof(PoisonGameError):
    code = 8
    default_message = "Proof rejected"


class GameAlreadyEnded(PoisonGameError):
    code = 9
    default_message = "Match has already finished"


class SelfPlay(PoisonGameError):
    code = 10
    default_message = "A player cannot play against themselves"


class VerificationKeyNotSet(PoisonGameError):
    code = 11
    default_message = "No verification key has been configured"


class VerificationKeyMalformed(PoisonGameError):
    code = 12
    default_message = "Verification key could not be parsed"


class NotAdmin(PoisonGameError):
    code = 13
    default_message = "Caller is not the administrator"


ALL_ERRORS: tuple[type[PoisonGameError], ...] = (
    MatchNotFound,
    NotPlayer,
    WrongPhase,
    AlreadyCommitted,
    NotYourTurn,
    TileAlreadyRevealed,
    InvalidTileIndex,
    InvalidProof,
    GameAlreadyEnded,
    SelfPlay,
    VerificationKeyNotSet,
    VerificationKeyMalformed,
    NotAdmin,
)

_BY_CODE = {cls.code: cls for cls in ALL_ERRORS}


def error_from_code(code: int, message: str | None = None) -> PoisonGameError:
    """Rebuild an error instance from its numeric code.

    Raises:
        ValueError: If the code is not part of the taxonomy.
    """
    try:
        cls = _BY_CODE[code]
    except KeyError:
        raise ValueError(f"Unknown error code: {code}") from None
    return cls(message)
