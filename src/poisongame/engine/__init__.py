"""Match engine module for the Poison Game.

This module contains the core game logic including:
- auth: Caller authorizations checked by every mutating operation
- proof: Public input construction and the verifier contract
- escrow: Wager escrow contract
- rules: Pluggable rules variants (exhaustive scoring, race to all specials)
- outcome: Terminal-state evaluation and settlement
- match_engine: The commit / attack / respond state machine

Usage:
    from poisongame.engine import CallContext, MatchEngine, StoredEscrow, get_rules
    from poisongame.storage import open_repositories

    repos = open_repositories()
    engine = MatchEngine(
        matches=repos.matches,
        settings=repos.settings,
        verifier=DigestVerifier(),
        escrow=StoredEscrow(repos.escrow),
        rules=get_rules("race"),
    )

    ctx = CallContext.for_caller("alice")
    engine.attack(ctx, session_id=1, attacker="alice", tile_index=3)
"""

from poisongame.engine.auth import Authorization, AuthorizationError, CallContext
from poisongame.engine.escrow import EscrowBook, EscrowError, EscrowLedger, EscrowLock, InMemoryEscrow, StoredEscrow
from poisongame.engine.match_engine import (
    DEFAULT_DEPLOYMENT_ID,
    SETTING_ADMIN,
    SETTING_ESCROW_ADDRESS,
    SETTING_VERIFICATION_KEY,
    MatchEngine,
)
from poisongame.engine.outcome import evaluate_outcome, finish_match
from poisongame.engine.proof import (
    FIELD_BYTES,
    PROOF_BYTES,
    PUBLIC_INPUT_BYTES,
    VERIFICATION_KEY_BYTES,
    DigestVerifier,
    ProofVerifier,
    VerificationError,
    build_public_inputs,
    encode_field,
    expected_digest_proof,
    split_public_inputs,
)
from poisongame.engine.rules import (
    ExhaustiveRules,
    RaceRules,
    RulesPolicy,
    RulesVariant,
    get_rules,
)

__all__ = [
    # Engine
    "MatchEngine",
    "DEFAULT_DEPLOYMENT_ID",
    "SETTING_ADMIN",
    "SETTING_ESCROW_ADDRESS",
    "SETTING_VERIFICATION_KEY",
    # Auth
    "Authorization",
    "AuthorizationError",
    "CallContext",
    # Escrow
    "EscrowError",
    "EscrowLedger",
    "EscrowLock",
    "InMemoryEscrow",
    "StoredEscrow",
    "EscrowBook",
    # Outcome
    "evaluate_outcome",
    "finish_match",
    # Proof
    "FIELD_BYTES",
    "PROOF_BYTES",
    "PUBLIC_INPUT_BYTES",
    "VERIFICATION_KEY_BYTES",
    "DigestVerifier",
    "ProofVerifier",
    "VerificationError",
    "build_public_inputs",
    "encode_field",
    "expected_digest_proof",
    "split_public_inputs",
    # Rules
    "ExhaustiveRules",
    "RaceRules",
    "RulesPolicy",
    "RulesVariant",
    "get_rules",
]
