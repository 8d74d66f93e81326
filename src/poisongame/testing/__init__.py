"""Development tooling for the Poison Game.

Key classes:
- DigestProver: Proofs accepted by the development verifier
- BoardHolder: A player's private board, salt and prover
- MatchRunner: Plays complete matches through a real MatchEngine

Usage:
    from poisongame.testing import MatchRunner, create_local_engine

    engine, escrow, key = create_local_engine("/tmp/poison", "exhaustive")
    result = MatchRunner(engine, key, escrow, random_seed=1).run_match(session_id=1)
"""

from .match_runner import MatchResult, MatchRunner, create_local_engine
from .prover import BoardHolder, DigestProver, compute_commitment, generate_salt

__all__ = [
    "BoardHolder",
    "DigestProver",
    "MatchResult",
    "MatchRunner",
    "compute_commitment",
    "create_local_engine",
    "generate_salt",
]
