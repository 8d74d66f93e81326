"""Tests for poisongame.engine.rules.

Rules are exercised directly on Match records here; the engine tests play
the same variants end to end.
"""

import pytest

from poisongame.engine.rules import (
    NORMAL_POINTS,
    POISON_POINTS,
    ExhaustiveRules,
    RaceRules,
    RulesVariant,
    get_rules,
)
from poisongame.models.match import BOARD_SIZE, Match, Phase, RevealedTile, Seat, TileType

A, B = Seat.A, Seat.B


def make_match(**kwargs) -> Match:
    return Match(
        session_id=1,
        player_a="alice",
        player_b="bob",
        committed_a=True,
        committed_b=True,
        phase=Phase.ACTIVE,
        **kwargs,
    )


def full_board(poison=(0, 1), shield=2) -> list[RevealedTile]:
    tiles = []
    for i in range(BOARD_SIZE):
        if i in poison:
            tile_type = TileType.POISON
        elif i == shield:
            tile_type = TileType.SHIELD
        else:
            tile_type = TileType.NORMAL
        tiles.append(RevealedTile(tile_index=i, tile_type=tile_type))
    return tiles


class TestGetRules:
    """Tests for the rules factory."""

    def test_by_enum(self):
        assert isinstance(get_rules(RulesVariant.EXHAUSTIVE), ExhaustiveRules)

    def test_by_string(self):
        assert isinstance(get_rules("RACE"), RaceRules)
        assert get_rules("race").variant is RulesVariant.RACE

    def test_unknown_variant(self):
        with pytest.raises(ValueError):
            get_rules("sudden_death")


class TestExhaustiveRules:
    """Scoring variant."""

    @pytest.fixture
    def rules(self):
        return ExhaustiveRules()

    def test_points(self, rules):
        match = make_match()
        rules.apply_reveal(match, A, TileType.NORMAL)
        rules.apply_reveal(match, B, TileType.POISON)
        assert match.score_a == NORMAL_POINTS
        assert match.score_b == POISON_POINTS

    def test_shield_marks_attacker_for_skip(self, rules):
        match = make_match()
        rules.apply_reveal(match, B, TileType.SHIELD)
        assert match.skip_seat is B
        assert (match.score_a, match.score_b) == (0, 0)

    def test_opposing_skips_cancel(self, rules):
        match = make_match(skip_seat=A)
        rules.apply_reveal(match, B, TileType.SHIELD)
        assert match.skip_seat is None

    def test_next_turn_alternates(self, rules):
        match = make_match()
        assert rules.next_turn(match, A, TileType.NORMAL) is B

    def test_next_turn_consumes_skip(self, rules):
        match = make_match(skip_seat=B)
        assert rules.next_turn(match, A, TileType.NORMAL) is A
        assert match.skip_seat is None

    def test_turn_stays_when_opponent_has_no_targets(self, rules):
        # B has revealed all of A's board; A still has tiles to attack
        match = make_match(revealed_on_a=full_board())
        assert rules.next_turn(match, A, TileType.NORMAL) is A

    def test_no_winner_until_both_boards_exhausted(self, rules):
        match = make_match(revealed_on_a=full_board(), score_b=100)
        assert rules.winner(match) is None

    def test_higher_score_wins(self, rules):
        match = make_match(revealed_on_a=full_board(), revealed_on_b=full_board(), score_a=3, score_b=6)
        assert rules.winner(match) is B

    def test_tie_goes_to_player_a(self, rules):
        match = make_match(revealed_on_a=full_board(), revealed_on_b=full_board(), score_a=6, score_b=6)
        assert rules.winner(match) is A


class TestRaceRules:
    """Find-all-specials variant."""

    @pytest.fixture
    def rules(self):
        return RaceRules()

    def test_reveal_changes_nothing(self, rules):
        match = make_match()
        rules.apply_reveal(match, A, TileType.POISON)
        assert (match.score_a, match.score_b, match.skip_seat) == (0, 0, None)

    def test_winner_needs_all_three_specials(self, rules):
        partial = [
            RevealedTile(tile_index=0, tile_type=TileType.POISON),
            RevealedTile(tile_index=1, tile_type=TileType.POISON),
        ]
        match = make_match(revealed_on_b=partial)
        assert rules.winner(match) is None

        match.revealed_on_b.append(RevealedTile(tile_index=2, tile_type=TileType.SHIELD))
        assert rules.has_found_all(match, A)
        assert rules.winner(match) is A

    def test_player_b_can_win(self, rules):
        match = make_match(revealed_on_a=full_board(poison=(13, 14), shield=12)[10:])
        assert rules.winner(match) is B

    def test_shield_grants_bonus_turn(self, rules):
        match = make_match()
        assert rules.next_turn(match, A, TileType.SHIELD) is A
        assert rules.next_turn(match, A, TileType.POISON) is B

    def test_bonus_turn_passes_when_nothing_left_to_attack(self, rules):
        match = make_match(revealed_on_b=full_board(poison=(), shield=14))
        assert rules.next_turn(match, A, TileType.SHIELD) is B
