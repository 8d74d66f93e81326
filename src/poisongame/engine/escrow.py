"""Escrow ledger contract.

The escrow ledger holds both players' wagers for the length of a match. The
engine calls it twice per match: once to lock the wagers when the match
starts, once to settle when the match finishes. Any exception raised by the
ledger aborts the engine operation that made the call, and no match state is
written.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from typing import Protocol

from poisongame.storage.repository import EscrowRepository

logger = logging.getLogger(__name__)


class EscrowError(Exception):
    """Raised by a ledger that refuses a lock or settlement."""


class EscrowLedger(Protocol):
    """Interface of the wager escrow."""

    def lock(
        self,
        match_contract: str,
        session_id: int,
        player_a: str,
        player_b: str,
        wager_a: int,
        wager_b: int,
    ) -> None: ...

    def settle(self, session_id: int, first_player_won: bool) -> None: ...


@dataclass
class EscrowLock:
    """Wagers held for one session."""

    match_contract: str
    session_id: int
    player_a: str
    player_b: str
    wager_a: int
    wager_b: int
    settled: bool = False
    first_player_won: bool | None = None


class EscrowBook:
    """Ledger rules shared by every escrow implementation.

    A session can be locked again only once its previous lock is settled,
    and each lock settles at most once. Subclasses decide where locks live.
    """

    def get_lock(self, session_id: int) -> EscrowLock | None:
        raise NotImplementedError

    def _put_lock(self, entry: EscrowLock) -> None:
        raise NotImplementedError

    def lock(
        self,
        match_contract: str,
        session_id: int,
        player_a: str,
        player_b: str,
        wager_a: int,
        wager_b: int,
    ) -> None:
        existing = self.get_lock(session_id)
        if existing is not None and not existing.settled:
            raise EscrowError(f"Session {session_id} already has locked wagers")
        self._put_lock(EscrowLock(
            match_contract=match_contract,
            session_id=session_id,
            player_a=player_a,
            player_b=player_b,
            wager_a=wager_a,
            wager_b=wager_b,
        ))
        logger.info(f"Locked wagers for session {session_id}: {player_a}={wager_a}, {player_b}={wager_b}")

    def settle(self, session_id: int, first_player_won: bool) -> None:
        entry = self.get_lock(session_id)
        if entry is None:
            raise EscrowError(f"Session {session_id} has no locked wagers")
        if entry.settled:
            raise EscrowError(f"Session {session_id} is already settled")
        entry.settled = True
        entry.first_player_won = first_player_won
        self._put_lock(entry)
        winner = entry.player_a if first_player_won else entry.player_b
        logger.info(f"Settled session {session_id} in favour of {winner}")

    def payout(self, session_id: int) -> dict[str, int]:
        """Amounts owed per player after settlement (winner takes both wagers)."""
        entry = self.get_lock(session_id)
        if entry is None or not entry.settled:
            return {}
        pot = entry.wager_a + entry.wager_b
        winner = entry.player_a if entry.first_player_won else entry.player_b
        loser = entry.player_b if entry.first_player_won else entry.player_a
        return {winner: pot, loser: 0}


class InMemoryEscrow(EscrowBook):
    """Process-local escrow ledger.

    Keeps locks in a dict. Used for the CLI simulator and tests.
    """

    def __init__(self) -> None:
        self.locks: dict[int, EscrowLock] = {}
        self.settlements: list[tuple[int, bool]] = []

    def get_lock(self, session_id: int) -> EscrowLock | None:
        return self.locks.get(session_id)

    def _put_lock(self, entry: EscrowLock) -> None:
        self.locks[entry.session_id] = entry

    def settle(self, session_id: int, first_player_won: bool) -> None:
        super().settle(session_id, first_player_won)
        self.settlements.append((session_id, first_player_won))


class StoredEscrow(EscrowBook):
    """Escrow ledger persisted through an EscrowRepository.

    Locks survive restarts of the process that made them, so it is the
    ledger for any engine whose match records are persisted too.
    """

    def __init__(self, repository: EscrowRepository) -> None:
        self.repository = repository

    def get_lock(self, session_id: int) -> EscrowLock | None:
        record = self.repository.load_lock(session_id)
        if record is None:
            return None
        return EscrowLock(**{f.name: record[f.name] for f in fields(EscrowLock) if f.name in record})

    def _put_lock(self, entry: EscrowLock) -> None:
        self.repository.save_lock(entry.session_id, asdict(entry))
