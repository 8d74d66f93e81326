"""Outcome evaluation for the Poison Game.

Run after every accepted reveal. If the rules policy reports a winner, the
escrow ledger is asked to settle once and the match is frozen:

    outcome = PLAYER_A_WON | PLAYER_B_WON
    phase   = FINISHED

Settlement happens on the staged copy of the match. If the ledger raises,
the caller discards the copy, so the stored record never shows a finished
match whose wagers were not settled.
"""

from __future__ import annotations

import logging

from poisongame.engine.escrow import EscrowLedger
from poisongame.engine.rules import RulesPolicy
from poisongame.models.match import Match, Outcome, Phase, Seat

logger = logging.getLogger(__name__)


def evaluate_outcome(match: Match, rules: RulesPolicy) -> Seat | None:
    """Return the winning seat if ``match`` has reached a terminal state."""
    if match.outcome is not None:
        return match.outcome.winner
    return rules.winner(match)


def finish_match(match: Match, winner: Seat, escrow: EscrowLedger) -> None:
    """Settle the wagers and freeze the match in favour of ``winner``."""
    if match.outcome is not None:
        raise ValueError(f"Match {match.session_id} is already finished")

    escrow.settle(match.session_id, winner is Seat.A)

    match.outcome = Outcome.for_winner(winner)
    match.phase = Phase.FINISHED
    match.pending_attack = None
    match.skip_seat = None
    logger.info(
        f"Match {match.session_id} finished: {match.player_at(winner)} won "
        f"(score {match.score_a}-{match.score_b})"
    )
