"""Board layouts.

The engine never handles boards. These models exist for the tooling that
sits on the player's side of a commitment: the development prover and the
match runner.
"""

from __future__ import annotations

import random

from pydantic import BaseModel, field_validator

from .match import BOARD_SIZE, POISON_COUNT, SHIELD_COUNT, TileType


class Board(BaseModel):
    """A complete, valid board layout."""

    tiles: tuple[TileType, ...]

    @field_validator("tiles")
    @classmethod
    def validate_layout(cls, v: tuple[TileType, ...]) -> tuple[TileType, ...]:
        """A board has exactly 15 tiles with 2 Poison and 1 Shield."""
        if len(v) != BOARD_SIZE:
            raise ValueError(f"Need {BOARD_SIZE} tiles, got {len(v)}")
        poisons = sum(1 for t in v if t is TileType.POISON)
        shields = sum(1 for t in v if t is TileType.SHIELD)
        if poisons != POISON_COUNT:
            raise ValueError(f"Need {POISON_COUNT} poison, got {poisons}")
        if shields != SHIELD_COUNT:
            raise ValueError(f"Need {SHIELD_COUNT} shield, got {shields}")
        return v

    @classmethod
    def random(cls, rng: random.Random | None = None) -> Board:
        """Place the specials uniformly at random."""
        rng = rng or random.Random()
        tiles = [TileType.NORMAL] * BOARD_SIZE
        special_slots = rng.sample(range(BOARD_SIZE), POISON_COUNT + SHIELD_COUNT)
        for slot in special_slots[:POISON_COUNT]:
            tiles[slot] = TileType.POISON
        for slot in special_slots[POISON_COUNT:]:
            tiles[slot] = TileType.SHIELD
        return cls(tiles=tuple(tiles))

    def tile_at(self, index: int) -> TileType:
        if not 0 <= index < BOARD_SIZE:
            raise IndexError(f"Tile index {index} outside board")
        return self.tiles[index]
