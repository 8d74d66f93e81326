"""Shared pytest fixtures and markers for all tests."""

import pytest

from poisongame.engine.auth import Authorization, CallContext
from poisongame.engine.escrow import InMemoryEscrow
from poisongame.engine.match_engine import MatchEngine
from poisongame.engine.proof import VERIFICATION_KEY_BYTES, DigestVerifier
from poisongame.engine.rules import get_rules
from poisongame.models.board import Board
from poisongame.models.match import BOARD_SIZE, Seat, TileType
from poisongame.storage.file_repo import FileMatchRepository, FileSettingsRepository
from poisongame.testing.prover import BoardHolder, DigestProver

ADMIN = "admin"
ALICE = "alice"
BOB = "bob"
START_TIME = 1_700_000_000.0


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests that play complete matches"
    )
    config.addinivalue_line(
        "markers", "webapp: marks webapp-specific tests"
    )


def make_board(poison=(0, 1), shield=2) -> Board:
    """Board with specials at fixed positions, Normal everywhere else."""
    tiles = [TileType.NORMAL] * BOARD_SIZE
    for index in poison:
        tiles[index] = TileType.POISON
    tiles[shield] = TileType.SHIELD
    return Board(tiles=tuple(tiles))


class FakeClock:
    """Controllable time source for the engine."""

    def __init__(self, now: float = START_TIME):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class MatchTable:
    """Drives one session through an engine on behalf of both players.

    Both players answer truthfully unless a test passes its own tile type
    or proof. A false tile type without a proof is sent with the proof of
    the true type.
    """

    def __init__(self, engine, verification_key, session_id=1, board_a=None, board_b=None):
        self.engine = engine
        self.session_id = session_id
        prover = DigestProver(verification_key)
        self.holders = {
            Seat.A: BoardHolder(ALICE, board_a or make_board(), prover, salt=11),
            Seat.B: BoardHolder(BOB, board_b or make_board(), prover, salt=22),
        }

    def player(self, seat: Seat) -> str:
        return self.holders[seat].player

    def ctx(self, seat: Seat) -> CallContext:
        return CallContext.for_caller(self.player(seat))

    def start(self, wager_a=100, wager_b=100):
        ctx = CallContext.from_authorizations([
            Authorization(ALICE, (self.session_id, wager_a)),
            Authorization(BOB, (self.session_id, wager_b)),
        ])
        return self.engine.start_match(ctx, self.session_id, ALICE, BOB, wager_a, wager_b)

    def commit(self, seat: Seat):
        holder = self.holders[seat]
        return self.engine.commit_board(self.ctx(seat), self.session_id, holder.player, holder.commitment)

    def start_and_commit(self):
        self.start()
        self.commit(Seat.A)
        return self.commit(Seat.B)

    def attack(self, seat: Seat, tile_index: int):
        return self.engine.attack(self.ctx(seat), self.session_id, self.player(seat), tile_index)

    def respond(self, seat: Seat, tile_type=None, proof=None):
        """``seat`` answers the pending attack on its own board."""
        holder = self.holders[seat]
        tile_index = self.engine.get_match(self.session_id).pending_attack
        truth, truthful_proof = holder.respond(tile_index)
        if tile_type is None:
            tile_type = truth
        if proof is None:
            proof = truthful_proof
        return self.engine.respond_to_attack(
            self.ctx(seat), self.session_id, holder.player, int(tile_type), proof
        )

    def play(self, seat: Seat, tile_index: int):
        """``seat`` attacks and the opponent answers truthfully."""
        self.attack(seat, tile_index)
        return self.respond(seat.opponent)

    @property
    def match(self):
        return self.engine.get_match(self.session_id)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def escrow():
    return InMemoryEscrow()


@pytest.fixture
def verification_key():
    return bytes(range(256)) * 6 + bytes(VERIFICATION_KEY_BYTES - 256 * 6)


@pytest.fixture
def make_engine(tmp_path, escrow, clock, verification_key):
    """Factory for engines over fresh file storage, bootstrapped with a key."""
    created = []

    def _make(variant="exhaustive", verifier=None, install_key=True, ledger=None):
        root = tmp_path / f"engine{len(created)}"
        engine = MatchEngine(
            matches=FileMatchRepository(root / "matches"),
            settings=FileSettingsRepository(root / "settings"),
            verifier=verifier or DigestVerifier(),
            escrow=ledger or escrow,
            rules=get_rules(variant),
            clock=clock,
        )
        engine.bootstrap(ADMIN, "escrow-1")
        if install_key:
            engine.set_verification_key(CallContext.for_caller(ADMIN), ADMIN, verification_key)
        created.append(engine)
        return engine

    return _make


@pytest.fixture
def engine(make_engine):
    """Exhaustive-rules engine with a verification key installed."""
    return make_engine("exhaustive")


@pytest.fixture
def race_engine(make_engine):
    return make_engine("race")


@pytest.fixture
def table(engine, verification_key):
    return MatchTable(engine, verification_key)


@pytest.fixture
def race_table(race_engine, verification_key):
    return MatchTable(race_engine, verification_key)


@pytest.fixture
def make_table(verification_key):
    """Factory for a MatchTable over any engine, with optional custom boards."""

    def _make(engine, session_id=1, board_a=None, board_b=None):
        return MatchTable(engine, verification_key, session_id, board_a, board_b)

    return _make


@pytest.fixture
def board_with():
    """The make_board helper: specials at given positions."""
    return make_board
