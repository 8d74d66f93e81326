"""Rules variants for the Poison Game.

The attack/response protocol is the same for every deployment. What varies
is what a proven tile does and when the match ends. Each deployment selects
exactly one policy.

EXHAUSTIVE (scoring):
- Normal: attacker +1
- Poison: attacker -3
- Shield: attacker's next turn is skipped
- Ends when both boards are fully revealed; higher score wins,
  ties go to player A

RACE (find all specials):
- Ends the moment one attacker has found 2 Poison and 1 Shield on the
  opponent's board; that attacker wins
- Shield grants the attacker a bonus turn
- If both boards run out without a winner, the player who found more
  specials wins, ties go to player A

Shared turn rule: the turn never passes to a player who has nothing left
to attack.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

from poisongame.models.match import POISON_COUNT, SHIELD_COUNT, Match, Seat, TileType

NORMAL_POINTS = 1
POISON_POINTS = -3


class RulesVariant(Enum):
    """Available rules variants."""

    EXHAUSTIVE = "exhaustive"
    RACE = "race"


class RulesPolicy(ABC):
    """Consequences and termination for proven reveals."""

    variant: RulesVariant

    @abstractmethod
    def apply_reveal(self, match: Match, attacker: Seat, tile_type: TileType) -> None:
        """Apply the consequence of ``attacker`` revealing ``tile_type``."""

    @abstractmethod
    def winner(self, match: Match) -> Seat | None:
        """Return the winning seat if the match is over, else None."""

    @abstractmethod
    def next_turn(self, match: Match, attacker: Seat, tile_type: TileType) -> Seat:
        """Seat that attacks next after a non-terminal reveal."""

    @staticmethod
    def _playable(match: Match, preferred: Seat) -> Seat:
        """``preferred`` if it still has targets, otherwise the other seat."""
        if match.has_targets(preferred):
            return preferred
        return preferred.opponent

    @staticmethod
    def _both_boards_exhausted(match: Match) -> bool:
        return match.board_exhausted(Seat.A) and match.board_exhausted(Seat.B)


class ExhaustiveRules(RulesPolicy):
    """Score every tile; the whole of both boards is played out."""

    variant = RulesVariant.EXHAUSTIVE

    def apply_reveal(self, match: Match, attacker: Seat, tile_type: TileType) -> None:
        if tile_type is TileType.NORMAL:
            match.add_score(attacker, NORMAL_POINTS)
        elif tile_type is TileType.POISON:
            match.add_score(attacker, POISON_POINTS)
        elif match.skip_seat is attacker.opponent:
            # Opposing skips cancel out
            match.skip_seat = None
        else:
            match.skip_seat = attacker

    def winner(self, match: Match) -> Seat | None:
        if not self._both_boards_exhausted(match):
            return None
        # Tie goes to player A
        return Seat.A if match.score_a >= match.score_b else Seat.B

    def next_turn(self, match: Match, attacker: Seat, tile_type: TileType) -> Seat:
        candidate = attacker.opponent
        if match.skip_seat is candidate:
            match.skip_seat = None
            candidate = attacker
        return self._playable(match, candidate)


class RaceRules(RulesPolicy):
    """First attacker to uncover every special tile wins."""

    variant = RulesVariant.RACE

    def apply_reveal(self, match: Match, attacker: Seat, tile_type: TileType) -> None:
        # Progress is read straight off the revealed tiles
        pass

    def has_found_all(self, match: Match, attacker: Seat) -> bool:
        poison, shield = match.specials_found_by(attacker)
        return poison >= POISON_COUNT and shield >= SHIELD_COUNT

    def winner(self, match: Match) -> Seat | None:
        for seat in Seat:
            if self.has_found_all(match, seat):
                return seat
        if self._both_boards_exhausted(match):
            found_a = sum(match.specials_found_by(Seat.A))
            found_b = sum(match.specials_found_by(Seat.B))
            return Seat.A if found_a >= found_b else Seat.B
        return None

    def next_turn(self, match: Match, attacker: Seat, tile_type: TileType) -> Seat:
        if tile_type is TileType.SHIELD:
            return self._playable(match, attacker)
        return self._playable(match, attacker.opponent)


_RULES: dict[RulesVariant, type[RulesPolicy]] = {
    RulesVariant.EXHAUSTIVE: ExhaustiveRules,
    RulesVariant.RACE: RaceRules,
}


def get_rules(variant: RulesVariant | str) -> RulesPolicy:
    """Factory for a rules policy.

    Args:
        variant: RulesVariant or its string value ("exhaustive", "race")

    Raises:
        ValueError: If the variant is unknown.
    """
    if isinstance(variant, str):
        variant = RulesVariant(variant.lower())
    return _RULES[variant]()
