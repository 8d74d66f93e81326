"""Match record models for the Poison Game.

A match is the single source of truth for one game session. It is stored as
one keyed record and rewritten in full by every successful operation.

Board facts:
- Each board has BOARD_SIZE (15) tiles: 2 Poison, 1 Shield, 12 Normal
- The engine never sees a full board, only tiles proven on demand
- Tiles revealed on a player's board are kept in the order they were proven
"""

from __future__ import annotations

from enum import Enum, IntEnum

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator

BOARD_SIZE = 15
POISON_COUNT = 2
SHIELD_COUNT = 1
COMMITMENT_BYTES = 32
ZERO_COMMITMENT = bytes(COMMITMENT_BYTES)
SESSION_ID_MAX = 2**32 - 1

# Roughly 30 days, the retention window of an abandoned match
MATCH_TTL_SECONDS = 30 * 24 * 60 * 60


class TileType(IntEnum):
    """Type of a single tile. Values match the proof's public input encoding."""

    NORMAL = 0
    POISON = 1
    SHIELD = 2

    @property
    def is_special(self) -> bool:
        return self is not TileType.NORMAL


class Phase(Enum):
    """Match phase. Transitions only move forward."""

    AWAITING_COMMITMENTS = "awaiting_commitments"
    ACTIVE = "active"
    FINISHED = "finished"


class Seat(Enum):
    """A player's position in the match."""

    A = "A"
    B = "B"

    @property
    def opponent(self) -> Seat:
        return Seat.B if self is Seat.A else Seat.A


class Outcome(Enum):
    """Terminal result of a match."""

    PLAYER_A_WON = "player_a_won"
    PLAYER_B_WON = "player_b_won"

    @classmethod
    def for_winner(cls, seat: Seat) -> Outcome:
        return cls.PLAYER_A_WON if seat is Seat.A else cls.PLAYER_B_WON

    @property
    def winner(self) -> Seat:
        return Seat.A if self is Outcome.PLAYER_A_WON else Seat.B


def parse_commitment(value: bytes | str) -> bytes:
    """Accept raw bytes or a hex string and return exactly 32 bytes.

    Raises:
        ValueError: If the value is not valid hex or has the wrong length.
    """
    if isinstance(value, str):
        text = value[2:] if value.startswith("0x") else value
        value = bytes.fromhex(text)
    value = bytes(value)
    if len(value) != COMMITMENT_BYTES:
        raise ValueError(f"Commitment must be {COMMITMENT_BYTES} bytes, got {len(value)}")
    return value


class RevealedTile(BaseModel):
    """A tile whose type has been proven against its board commitment."""

    tile_index: int = Field(ge=0, lt=BOARD_SIZE)
    tile_type: TileType


class Match(BaseModel):
    """Complete state of one match.

    Attributes:
        session_id: Key of the record, unique within the deployment's lifetime
        player_a: First player's identity (attacks first)
        player_b: Second player's identity
        wager_a: Amount locked in escrow for player A
        wager_b: Amount locked in escrow for player B
        commitment_a: Hash binding player A to their board
        commitment_b: Hash binding player B to their board
        committed_a: Whether player A has committed
        committed_b: Whether player B has committed
        phase: Current phase
        turn: Seat whose turn it is to attack
        pending_attack: Tile index awaiting a proven response, if any
        revealed_on_a: Tiles proven on player A's board (attacked by B)
        revealed_on_b: Tiles proven on player B's board (attacked by A)
        score_a: Player A's accumulated score (exhaustive rules only)
        score_b: Player B's accumulated score (exhaustive rules only)
        skip_seat: Seat whose next turn is forfeited, if any
        outcome: Terminal result, set once when the match finishes
        created_at: Creation time in epoch seconds
        expires_at: Time after which the record is no longer reachable
    """

    session_id: int = Field(ge=0, le=SESSION_ID_MAX)
    player_a: str = Field(min_length=1)
    player_b: str = Field(min_length=1)
    wager_a: int = 0
    wager_b: int = 0

    commitment_a: bytes = Field(default=ZERO_COMMITMENT)
    commitment_b: bytes = Field(default=ZERO_COMMITMENT)
    committed_a: bool = False
    committed_b: bool = False

    phase: Phase = Phase.AWAITING_COMMITMENTS
    turn: Seat = Seat.A
    pending_attack: int | None = Field(default=None, ge=0, lt=BOARD_SIZE)

    revealed_on_a: list[RevealedTile] = Field(default_factory=list)
    revealed_on_b: list[RevealedTile] = Field(default_factory=list)

    score_a: int = 0
    score_b: int = 0
    skip_seat: Seat | None = None

    outcome: Outcome | None = None

    created_at: float = 0.0
    expires_at: float = 0.0

    @field_validator("commitment_a", "commitment_b", mode="before")
    @classmethod
    def decode_commitment(cls, v: bytes | str) -> bytes:
        """Commitments are stored as hex in JSON records."""
        return parse_commitment(v)

    @field_serializer("commitment_a", "commitment_b", when_used="json")
    def encode_commitment(self, v: bytes) -> str:
        return v.hex()

    @model_validator(mode="after")
    def validate_invariants(self) -> Match:
        self.check_invariants()
        return self

    def check_invariants(self) -> None:
        """Raise ValueError if the record violates a structural invariant."""
        if self.player_a == self.player_b:
            raise ValueError("player_a and player_b must be distinct")
        for seat in Seat:
            revealed = self.revealed_on(seat)
            indices = [tile.tile_index for tile in revealed]
            if len(indices) != len(set(indices)):
                raise ValueError(f"Duplicate tile index revealed on board {seat.value}")
            if len(indices) > BOARD_SIZE:
                raise ValueError(f"More than {BOARD_SIZE} tiles revealed on board {seat.value}")
        if (self.outcome is None) != (self.phase is not Phase.FINISHED):
            raise ValueError("outcome must be set exactly when the match is finished")
        if self.phase is not Phase.AWAITING_COMMITMENTS and not (self.committed_a and self.committed_b):
            raise ValueError("match left the commitment phase without both commitments")

    # Seat helpers

    def seat_of(self, player: str) -> Seat | None:
        """Return the seat held by ``player``, or None for outsiders."""
        if player == self.player_a:
            return Seat.A
        if player == self.player_b:
            return Seat.B
        return None

    def player_at(self, seat: Seat) -> str:
        return self.player_a if seat is Seat.A else self.player_b

    def commitment_of(self, seat: Seat) -> bytes:
        return self.commitment_a if seat is Seat.A else self.commitment_b

    def is_committed(self, seat: Seat) -> bool:
        return self.committed_a if seat is Seat.A else self.committed_b

    def revealed_on(self, seat: Seat) -> list[RevealedTile]:
        """Tiles proven on ``seat``'s own board."""
        return self.revealed_on_a if seat is Seat.A else self.revealed_on_b

    def score_of(self, seat: Seat) -> int:
        return self.score_a if seat is Seat.A else self.score_b

    def add_score(self, seat: Seat, delta: int) -> None:
        if seat is Seat.A:
            self.score_a += delta
        else:
            self.score_b += delta

    def is_revealed(self, seat: Seat, tile_index: int) -> bool:
        """Whether ``tile_index`` on ``seat``'s board has already been proven."""
        return any(tile.tile_index == tile_index for tile in self.revealed_on(seat))

    def specials_found_by(self, attacker: Seat) -> tuple[int, int]:
        """Count (poison, shield) tiles ``attacker`` has revealed on the opponent's board."""
        revealed = self.revealed_on(attacker.opponent)
        poison = sum(1 for tile in revealed if tile.tile_type is TileType.POISON)
        shield = sum(1 for tile in revealed if tile.tile_type is TileType.SHIELD)
        return poison, shield

    def has_targets(self, attacker: Seat) -> bool:
        """Whether ``attacker`` still has an unrevealed tile to attack."""
        return len(self.revealed_on(attacker.opponent)) < BOARD_SIZE

    def board_exhausted(self, seat: Seat) -> bool:
        return len(self.revealed_on(seat)) >= BOARD_SIZE

    def is_expired(self, now: float) -> bool:
        return self.expires_at > 0 and now >= self.expires_at

    @property
    def winner(self) -> str | None:
        """Identity of the winning player, or None while in progress."""
        if self.outcome is None:
            return None
        return self.player_at(self.outcome.winner)
