"""Core match engine for the Poison Game.

This module implements the MatchEngine class, the single authority over match
records. Every operation follows the same shape:

1. AUTHENTICATE - check the caller's authorizations, before anything else
2. LOAD - read the full match record (missing or expired -> MatchNotFound)
3. VALIDATE - check phase, seat, turn and arguments in a fixed order
4. STAGE - mutate a deep copy of the record
5. EXTERNAL - call escrow / verifier, if the operation needs it
6. WRITE - persist the staged record in one save

Any exception before step 6 leaves the stored record untouched. Steps 2-6
run under a per-session lock, so operations on one match are linearizable
while different matches never contend.

Match phases (see models.match.Phase):
    AWAITING_COMMITMENTS --(both committed)--> ACTIVE
    ACTIVE --(attack)--> ACTIVE[pending=tile]
    ACTIVE[pending] --(verified respond, not terminal)--> ACTIVE[pending=None]
    ACTIVE[pending] --(verified respond, terminal)--> FINISHED
    ACTIVE[pending] --(rejected respond)--> ACTIVE[pending unchanged]
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from poisongame.engine.auth import CallContext
from poisongame.engine.escrow import EscrowLedger
from poisongame.engine.outcome import evaluate_outcome, finish_match
from poisongame.engine.proof import PROOF_BYTES, ProofVerifier, VerificationError, build_public_inputs
from poisongame.engine.rules import RulesPolicy
from poisongame.errors import (
    AlreadyCommitted,
    GameAlreadyEnded,
    InvalidProof,
    InvalidTileIndex,
    MatchNotFound,
    NotAdmin,
    NotPlayer,
    NotYourTurn,
    SelfPlay,
    TileAlreadyRevealed,
    VerificationKeyNotSet,
    WrongPhase,
)
from poisongame.models.match import (
    BOARD_SIZE,
    MATCH_TTL_SECONDS,
    SESSION_ID_MAX,
    Match,
    Phase,
    RevealedTile,
    Seat,
    TileType,
    parse_commitment,
)
from poisongame.storage.repository import MatchRepository, SettingsRepository

logger = logging.getLogger(__name__)

SETTING_ADMIN = "admin"
SETTING_ESCROW_ADDRESS = "escrow_address"
SETTING_VERIFICATION_KEY = "verification_key"

DEFAULT_DEPLOYMENT_ID = "poison-game"


def _expired(expires_at: Optional[float], now: float) -> bool:
    return bool(expires_at) and expires_at <= now


class MatchEngine:
    """Rule engine managing match records.

    The MatchEngine handles:
    - Match lifecycle (start, wager lock)
    - Board commitments
    - Attack / proven-response exchange
    - Outcome evaluation and settlement
    - Deployment settings (administrator, escrow address, verification key)

    Attributes:
        rules: Rules policy selected for this deployment
        deployment_id: Identity passed to escrow as the match contract
        ttl_seconds: Retention window of a new match record
    """

    def __init__(
        self,
        matches: MatchRepository,
        settings: SettingsRepository,
        verifier: ProofVerifier,
        escrow: EscrowLedger,
        rules: RulesPolicy,
        deployment_id: str = DEFAULT_DEPLOYMENT_ID,
        ttl_seconds: float = MATCH_TTL_SECONDS,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        """Initialize the engine with its collaborators.

        Args:
            matches: Repository for match records
            settings: Repository for deployment settings
            verifier: Proof verification oracle
            escrow: Wager escrow ledger
            rules: Rules policy (see engine.rules.get_rules)
            deployment_id: Identity of this deployment, sent to escrow on lock
            ttl_seconds: How long a match record stays reachable
            clock: Source of the current time in epoch seconds
        """
        self._matches = matches
        self._settings = settings
        self._verifier = verifier
        self._escrow = escrow
        self.rules = rules
        self.deployment_id = deployment_id
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.time

        self._locks: dict[int, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # =========================================================================
    # Record access
    # =========================================================================

    @contextmanager
    def _session_lock(self, session_id: int) -> Iterator[None]:
        """Serialize read-modify-write cycles on one session."""
        with self._locks_guard:
            lock = self._locks.setdefault(session_id, threading.Lock())
        with lock:
            yield

    def _load_live(self, session_id: int) -> Optional[Match]:
        raw = self._matches.load_match(session_id)
        if raw is None:
            return None
        match = Match.model_validate(raw)
        if match.is_expired(self._clock()):
            return None
        return match

    def _load(self, session_id: int) -> Match:
        match = self._load_live(session_id)
        if match is None:
            raise MatchNotFound(f"No match for session {session_id}")
        return match

    def _save(self, match: Match) -> None:
        match.check_invariants()
        self._matches.save_match(match.session_id, match.model_dump(mode="json"))

    @staticmethod
    def _seat_or_raise(match: Match, player: str) -> Seat:
        seat = match.seat_of(player)
        if seat is None:
            raise NotPlayer(f"{player} is not playing session {match.session_id}")
        return seat

    # =========================================================================
    # Match Lifecycle
    # =========================================================================

    def start_match(
        self,
        ctx: CallContext,
        session_id: int,
        player_a: str,
        player_b: str,
        wager_a: int,
        wager_b: int,
    ) -> Match:
        """Create a match and lock both wagers in escrow.

        Each player must have authorized exactly (session_id, their wager).

        Raises:
            SelfPlay: If both players are the same identity.
            AuthorizationError: If either player's scoped authorization is missing.
            WrongPhase: If a live match already exists for this session.
            ValueError: If the session ID is out of range.
        """
        if not 0 <= session_id <= SESSION_ID_MAX:
            raise ValueError(f"Session ID must be in [0, {SESSION_ID_MAX}], got {session_id}")
        if player_a == player_b:
            raise SelfPlay()

        ctx.require_auth_for_args(player_a, (session_id, wager_a))
        ctx.require_auth_for_args(player_b, (session_id, wager_b))

        with self._session_lock(session_id):
            if self._load_live(session_id) is not None:
                raise WrongPhase(f"Session {session_id} already has a match")

            now = self._clock()
            match = Match(
                session_id=session_id,
                player_a=player_a,
                player_b=player_b,
                wager_a=wager_a,
                wager_b=wager_b,
                turn=Seat.A,
                created_at=now,
                expires_at=now + self.ttl_seconds,
            )

            self._escrow.lock(
                self.deployment_id,
                session_id,
                player_a,
                player_b,
                wager_a,
                wager_b,
            )
            self._save(match)

        logger.info(f"Match {session_id} started: {player_a} vs {player_b}")
        return match

    # =========================================================================
    # Commitment Phase
    # =========================================================================

    def commit_board(
        self,
        ctx: CallContext,
        session_id: int,
        player: str,
        commitment: bytes | str,
    ) -> Match:
        """Store a player's board commitment.

        The match becomes ACTIVE once both players have committed.

        Raises:
            AuthorizationError, MatchNotFound, WrongPhase, NotPlayer, AlreadyCommitted
            ValueError: If the commitment is not 32 bytes.
        """
        ctx.require_auth(player)
        commitment = parse_commitment(commitment)

        with self._session_lock(session_id):
            match = self._load(session_id)
            if match.phase is not Phase.AWAITING_COMMITMENTS:
                raise WrongPhase(f"Session {session_id} is {match.phase.value}")
            seat = self._seat_or_raise(match, player)
            if match.is_committed(seat):
                raise AlreadyCommitted(f"{player} already committed for session {session_id}")

            staged = match.model_copy(deep=True)
            if seat is Seat.A:
                staged.commitment_a = commitment
                staged.committed_a = True
            else:
                staged.commitment_b = commitment
                staged.committed_b = True

            if staged.committed_a and staged.committed_b:
                staged.phase = Phase.ACTIVE

            self._save(staged)

        logger.info(f"Match {session_id}: {player} committed board")
        if staged.phase is Phase.ACTIVE:
            logger.info(f"Match {session_id} is active, {staged.player_at(staged.turn)} attacks first")
        return staged

    # =========================================================================
    # Attack / Response
    # =========================================================================

    def _check_playable(self, match: Match) -> None:
        if match.outcome is not None:
            raise GameAlreadyEnded(f"Session {match.session_id} has finished")
        if match.phase is not Phase.ACTIVE:
            raise WrongPhase(f"Session {match.session_id} is {match.phase.value}")

    def attack(
        self,
        ctx: CallContext,
        session_id: int,
        attacker: str,
        tile_index: int,
    ) -> Match:
        """Stage an attack on a tile of the opponent's board.

        Raises:
            AuthorizationError, MatchNotFound, GameAlreadyEnded, WrongPhase,
            InvalidTileIndex, NotPlayer, NotYourTurn, TileAlreadyRevealed
        """
        ctx.require_auth(attacker)

        with self._session_lock(session_id):
            match = self._load(session_id)
            self._check_playable(match)
            if match.pending_attack is not None:
                raise WrongPhase(f"Session {session_id} already has a pending attack")
            if not 0 <= tile_index < BOARD_SIZE:
                raise InvalidTileIndex(f"Tile index {tile_index} outside [0, {BOARD_SIZE})")
            seat = self._seat_or_raise(match, attacker)
            if seat is not match.turn:
                raise NotYourTurn(f"It is {match.player_at(match.turn)}'s turn")
            if match.is_revealed(seat.opponent, tile_index):
                raise TileAlreadyRevealed(f"Tile {tile_index} is already revealed")

            staged = match.model_copy(deep=True)
            staged.pending_attack = tile_index
            self._save(staged)

        logger.info(f"Match {session_id}: {attacker} attacks tile {tile_index}")
        return staged

    def _load_verification_key(self):
        raw = self._settings.get_setting(SETTING_VERIFICATION_KEY)
        if raw is None:
            raise VerificationKeyNotSet()
        return self._verifier.parse_key(bytes.fromhex(raw))

    def respond_to_attack(
        self,
        ctx: CallContext,
        session_id: int,
        defender: str,
        claimed_tile_type: int,
        proof: bytes,
    ) -> Match:
        """Answer the pending attack with a tile type and its proof.

        The public inputs are rebuilt from stored state: the defender's
        commitment and the pending tile index. Only the claimed tile type comes
        from the defender. A rejected proof leaves the attack pending.

        Raises:
            AuthorizationError, MatchNotFound, GameAlreadyEnded, WrongPhase,
            NotPlayer, NotYourTurn, InvalidProof, VerificationKeyNotSet,
            VerificationKeyMalformed
        """
        ctx.require_auth(defender)

        with self._session_lock(session_id):
            match = self._load(session_id)
            self._check_playable(match)
            if match.pending_attack is None:
                raise WrongPhase(f"Session {session_id} has no pending attack")
            try:
                tile_type = TileType(claimed_tile_type)
            except ValueError:
                raise InvalidProof(f"Unknown tile type {claimed_tile_type!r}") from None
            seat = self._seat_or_raise(match, defender)
            if seat is match.turn:
                raise NotYourTurn(f"{defender} is the attacker, not the defender")
            if len(proof) != PROOF_BYTES:
                raise InvalidProof(f"Proof must be {PROOF_BYTES} bytes, got {len(proof)}")

            key = self._load_verification_key()
            tile_index = match.pending_attack
            public_inputs = build_public_inputs(match.commitment_of(seat), tile_index, tile_type)
            logger.debug(f"Match {session_id}: verifying tile {tile_index} as {tile_type.name}")

            try:
                verified = self._verifier.verify(key, bytes(proof), public_inputs)
            except VerificationError as e:
                logger.warning(f"Match {session_id}: verifier error: {e}")
                verified = False
            if not verified:
                logger.warning(f"Match {session_id}: proof rejected for tile {tile_index} from {defender}")
                raise InvalidProof()

            attacker = seat.opponent
            staged = match.model_copy(deep=True)
            staged.revealed_on(seat).append(RevealedTile(tile_index=tile_index, tile_type=tile_type))
            staged.pending_attack = None
            self.rules.apply_reveal(staged, attacker, tile_type)

            winner = evaluate_outcome(staged, self.rules)
            if winner is not None:
                finish_match(staged, winner, self._escrow)
            else:
                staged.turn = self.rules.next_turn(staged, attacker, tile_type)

            self._save(staged)

        logger.info(f"Match {session_id}: tile {tile_index} on {defender}'s board proven {tile_type.name}")
        return staged

    def get_match(self, session_id: int) -> Match:
        """Return a snapshot of the match.

        Raises:
            MatchNotFound: If no live match exists for the session.
        """
        return self._load(session_id)

    def purge_expired(self) -> int:
        """Delete expired match records. Returns the number removed.

        Expiry is rechecked under the session lock before each delete, so a
        match started on a reused session ID after the listing survives.
        """
        removed = 0
        for summary in self._matches.list_matches():
            if not _expired(summary.get("expires_at"), self._clock()):
                continue
            session_id = summary["session_id"]
            with self._session_lock(session_id):
                raw = self._matches.load_match(session_id)
                if raw is None or not _expired(raw.get("expires_at"), self._clock()):
                    continue
                if self._matches.delete_match(session_id):
                    removed += 1
        if removed:
            logger.info(f"Purged {removed} expired matches")
        return removed

    # =========================================================================
    # Administration
    # =========================================================================

    def bootstrap(self, admin: str, escrow_address: str) -> None:
        """Initialize deployment settings on first run.

        Raises:
            ValueError: If an administrator is already configured.
        """
        if self.is_initialized():
            raise ValueError("Deployment is already initialized")
        self._settings.set_setting(SETTING_ADMIN, admin)
        self._settings.set_setting(SETTING_ESCROW_ADDRESS, escrow_address)
        logger.info(f"Deployment {self.deployment_id} initialized with admin {admin}")

    def is_initialized(self) -> bool:
        """Whether an administrator has been configured."""
        return self._settings.has_setting(SETTING_ADMIN)

    def get_admin(self) -> str:
        admin = self._settings.get_setting(SETTING_ADMIN)
        if admin is None:
            raise RuntimeError("Admin not set")
        return admin

    def _require_admin(self, ctx: CallContext, caller: str) -> None:
        ctx.require_auth(caller)
        if caller != self.get_admin():
            logger.warning(f"Refused admin operation from {caller}")
            raise NotAdmin()

    def set_admin(self, ctx: CallContext, new_admin: str) -> None:
        """Hand administration to ``new_admin``. The current admin must authorize."""
        current = self.get_admin()
        ctx.require_auth(current)
        self._settings.set_setting(SETTING_ADMIN, new_admin)
        logger.info(f"Admin changed from {current} to {new_admin}")

    def get_escrow_address(self) -> str:
        address = self._settings.get_setting(SETTING_ESCROW_ADDRESS)
        if address is None:
            raise RuntimeError("Escrow address not set")
        return address

    def set_escrow_address(self, ctx: CallContext, caller: str, address: str) -> None:
        self._require_admin(ctx, caller)
        self._settings.set_setting(SETTING_ESCROW_ADDRESS, address)
        logger.info(f"Escrow address set to {address}")

    def set_verification_key(self, ctx: CallContext, caller: str, key_bytes: bytes) -> None:
        """Store (or rotate) the verification key.

        The key is parsed now so that malformed bytes are rejected at
        configuration time rather than on the first response.

        Raises:
            AuthorizationError, NotAdmin, VerificationKeyMalformed
        """
        self._require_admin(ctx, caller)
        self._verifier.parse_key(bytes(key_bytes))
        self._settings.set_setting(SETTING_VERIFICATION_KEY, bytes(key_bytes).hex())
        logger.info(f"Verification key set ({len(key_bytes)} bytes)")

    def has_verification_key(self) -> bool:
        return self._settings.has_setting(SETTING_VERIFICATION_KEY)
