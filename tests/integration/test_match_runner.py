"""Tests for the match runner.

Tests cover:
- Complete matches under both rules variants through a real MatchEngine
- Settlement of every finished match
- Reproducibility with a fixed seed
"""

import pytest

from poisongame.models.match import BOARD_SIZE, Outcome, Phase
from poisongame.testing.match_runner import MatchResult, MatchRunner, create_local_engine

pytestmark = pytest.mark.integration


class TestMatchRunner:
    """Tests for MatchRunner with real storage, verifier and escrow."""

    @pytest.mark.parametrize("variant", ["exhaustive", "race"])
    def test_match_runs_to_settlement(self, tmp_path, variant):
        engine, escrow, key = create_local_engine(tmp_path, variant)
        runner = MatchRunner(engine, key, escrow, random_seed=3)

        result = runner.run_match(session_id=1, wager_a=40, wager_b=60)

        assert isinstance(result, MatchResult)
        assert result.variant == variant
        assert result.winner in ("alice", "bob")
        assert result.settled
        assert escrow.payout(1)[result.winner] == 100

        match = engine.get_match(1)
        assert match.phase is Phase.FINISHED
        assert match.winner == result.winner
        assert result.reveals == len(match.revealed_on_a) + len(match.revealed_on_b)

    def test_exhaustive_reveals_every_tile(self, tmp_path):
        engine, escrow, key = create_local_engine(tmp_path, "exhaustive")
        result = MatchRunner(engine, key, escrow, random_seed=8).run_match(session_id=1)

        assert result.reveals == 2 * BOARD_SIZE
        # Every tile is scored, so both players end on 12 - 2 * 3
        assert (result.score_a, result.score_b) == (6, 6)
        assert engine.get_match(1).outcome is Outcome.PLAYER_A_WON

    def test_race_ends_on_third_special(self, tmp_path):
        engine, escrow, key = create_local_engine(tmp_path, "race")
        result = MatchRunner(engine, key, escrow, random_seed=11).run_match(session_id=1)

        winner_moves = [tile_type for player, _, tile_type in result.history if player == result.winner]
        assert winner_moves[-1] in ("POISON", "SHIELD")
        assert winner_moves.count("POISON") == 2
        assert winner_moves.count("SHIELD") == 1

    def test_same_seed_same_match(self, tmp_path):
        results = []
        for run in range(2):
            engine, escrow, key = create_local_engine(tmp_path / str(run), "race")
            results.append(MatchRunner(engine, key, escrow, random_seed=21).run_match(session_id=1))

        assert results[0].history == results[1].history

    def test_several_sessions_on_one_engine(self, tmp_path):
        engine, escrow, key = create_local_engine(tmp_path, "race")
        runner = MatchRunner(engine, key, escrow, random_seed=5)

        results = [runner.run_match(session_id=i) for i in range(1, 6)]

        assert [r.session_id for r in results] == [1, 2, 3, 4, 5]
        assert len(escrow.settlements) == 5

    def test_to_dict(self, tmp_path):
        engine, escrow, key = create_local_engine(tmp_path, "race")
        data = MatchRunner(engine, key, escrow, random_seed=2).run_match(session_id=1).to_dict()

        assert set(data) == {
            "session_id", "winner", "winner_seat", "variant", "reveals",
            "score_a", "score_b", "settled", "history",
        }
        assert data["winner_seat"] in ("A", "B")
