"""Tests for the escrow ledgers."""

import pytest

from poisongame.engine.escrow import EscrowError, InMemoryEscrow, StoredEscrow
from poisongame.storage.file_repo import FileEscrowRepository
from poisongame.storage.sqlite_repo import SQLiteEscrowRepository


@pytest.fixture
def ledger():
    ledger = InMemoryEscrow()
    ledger.lock("poison-game", 9, "alice", "bob", 30, 70)
    return ledger


class TestInMemoryEscrow:
    """Tests for lock / settle bookkeeping."""

    def test_lock_records_wagers(self, ledger):
        lock = ledger.locks[9]
        assert (lock.wager_a, lock.wager_b) == (30, 70)
        assert ledger.payout(9) == {}

    def test_double_lock_rejected(self, ledger):
        with pytest.raises(EscrowError, match="already has locked wagers"):
            ledger.lock("poison-game", 9, "alice", "bob", 1, 1)

    def test_settle_pays_winner_both_wagers(self, ledger):
        ledger.settle(9, first_player_won=False)
        assert ledger.settlements == [(9, False)]
        assert ledger.payout(9) == {"bob": 100, "alice": 0}

    def test_settle_once(self, ledger):
        ledger.settle(9, True)
        with pytest.raises(EscrowError, match="already settled"):
            ledger.settle(9, True)

    def test_settle_unknown_session(self, ledger):
        with pytest.raises(EscrowError):
            ledger.settle(10, True)

    def test_session_can_be_locked_again_after_settlement(self, ledger):
        ledger.settle(9, True)
        ledger.lock("poison-game", 9, "carol", "dave", 5, 5)
        assert not ledger.locks[9].settled


@pytest.fixture(params=["file", "sqlite"])
def open_ledger(request, tmp_path):
    """Factory for StoredEscrow ledgers sharing one store, as after a restart."""

    def _open():
        if request.param == "file":
            return StoredEscrow(FileEscrowRepository(tmp_path / "escrow"))
        return StoredEscrow(SQLiteEscrowRepository(str(tmp_path / "escrow.db")))

    return _open


class TestStoredEscrow:
    """Tests for the repository-backed ledger."""

    def test_lock_survives_reopen(self, open_ledger):
        open_ledger().lock("poison-game", 9, "alice", "bob", 30, 70)

        lock = open_ledger().get_lock(9)
        assert (lock.match_contract, lock.player_b, lock.wager_b) == ("poison-game", "bob", 70)
        assert not lock.settled

    def test_settle_after_reopen(self, open_ledger):
        open_ledger().lock("poison-game", 9, "alice", "bob", 30, 70)

        open_ledger().settle(9, first_player_won=True)
        assert open_ledger().payout(9) == {"alice": 100, "bob": 0}

    def test_settle_once_across_reopen(self, open_ledger):
        open_ledger().lock("poison-game", 9, "alice", "bob", 30, 70)
        open_ledger().settle(9, True)
        with pytest.raises(EscrowError, match="already settled"):
            open_ledger().settle(9, False)

    def test_double_lock_rejected_across_reopen(self, open_ledger):
        open_ledger().lock("poison-game", 9, "alice", "bob", 30, 70)
        with pytest.raises(EscrowError, match="already has locked wagers"):
            open_ledger().lock("poison-game", 9, "alice", "bob", 1, 1)

    def test_settle_unknown_session(self, open_ledger):
        with pytest.raises(EscrowError, match="no locked wagers"):
            open_ledger().settle(10, True)
