"""Operator command line for the Poison Game.

Usage:
    # Inspect one match
    poisongame show 42

    # List stored matches
    poisongame list

    # Delete expired match records
    poisongame purge

    # Play random matches locally and report win rates
    poisongame simulate --variant exhaustive --games 100 --seed 7

Storage is selected with the POISONGAME_* environment variables (see
poisongame.storage.config).
"""

import argparse
import json
import os
import sys
import tempfile
from collections import Counter
from datetime import datetime

from poisongame.engine.escrow import StoredEscrow
from poisongame.engine.match_engine import MatchEngine
from poisongame.engine.proof import DigestVerifier
from poisongame.engine.rules import RulesVariant, get_rules
from poisongame.errors import PoisonGameError
from poisongame.models.match import Match, Seat
from poisongame.storage import open_repositories
from poisongame.testing.match_runner import MatchResult, MatchRunner, create_local_engine


def build_engine() -> MatchEngine:
    """Engine over the environment-configured storage."""
    repos = open_repositories()
    return MatchEngine(
        matches=repos.matches,
        settings=repos.settings,
        verifier=DigestVerifier(),
        escrow=StoredEscrow(repos.escrow),
        rules=get_rules(os.environ.get("POISONGAME_RULES_VARIANT", RulesVariant.RACE.value)),
    )


def _format_time(timestamp: float) -> str:
    if not timestamp:
        return "-"
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M")


def format_match(match: Match) -> str:
    """Human-readable summary of one match."""
    lines = [
        f"Session {match.session_id}: {match.player_a} (A) vs {match.player_b} (B)",
        f"  Phase:    {match.phase.value}",
        f"  Wagers:   A={match.wager_a}  B={match.wager_b}",
        f"  Score:    A={match.score_a}  B={match.score_b}",
    ]
    if match.outcome is None:
        lines.append(f"  Turn:     {match.player_at(match.turn)}")
        if match.pending_attack is not None:
            lines.append(f"  Pending:  tile {match.pending_attack}")
    else:
        lines.append(f"  Winner:   {match.winner}")
    for seat in Seat:
        revealed = ", ".join(f"{t.tile_index}:{t.tile_type.name}" for t in match.revealed_on(seat))
        lines.append(f"  Board {seat.value}:  {revealed or '(nothing revealed)'}")
    lines.append(f"  Expires:  {_format_time(match.expires_at)}")
    return "\n".join(lines)


def cmd_show(args: argparse.Namespace) -> int:
    engine = build_engine()
    try:
        match = engine.get_match(args.session_id)
    except PoisonGameError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    print(format_match(match))
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    matches = open_repositories().matches.list_matches()
    if not matches:
        print("No matches stored.")
        return 0
    print(f"{'SESSION':>10}  {'PLAYER A':<16} {'PLAYER B':<16} {'PHASE':<22} {'OUTCOME':<14} EXPIRES")
    for m in matches:
        print(
            f"{m['session_id']:>10}  {m['player_a']:<16} {m['player_b']:<16} "
            f"{m['phase']:<22} {m['outcome'] or '-':<14} {_format_time(m['expires_at'])}"
        )
    return 0


def cmd_purge(args: argparse.Namespace) -> int:
    removed = build_engine().purge_expired()
    print(f"Purged {removed} expired match(es).")
    return 0


def summarize(results: list[MatchResult]) -> dict:
    """Aggregate statistics over simulated matches."""
    seats = Counter(r.winner_seat for r in results)
    games = len(results)
    return {
        "games": games,
        "player_a_wins": seats.get(Seat.A.value, 0),
        "player_b_wins": seats.get(Seat.B.value, 0),
        "avg_reveals": sum(r.reveals for r in results) / games if games else 0.0,
        "all_settled": all(r.settled for r in results),
    }


def cmd_simulate(args: argparse.Namespace) -> int:
    with tempfile.TemporaryDirectory(prefix="poisongame-sim-") as tmp_dir:
        engine, escrow, key = create_local_engine(tmp_dir, args.variant)
        runner = MatchRunner(engine, key, escrow, random_seed=args.seed)
        results = [runner.run_match(session_id=i + 1) for i in range(args.games)]

    summary = summarize(results)
    if args.json:
        print(json.dumps({"summary": summary, "matches": [r.to_dict() for r in results]}, indent=2))
        return 0

    print(f"Variant: {args.variant}")
    print(f"  Games played:    {summary['games']}")
    print(f"  Player A wins:   {summary['player_a_wins']}")
    print(f"  Player B wins:   {summary['player_b_wins']}")
    print(f"  Average reveals: {summary['avg_reveals']:.1f}")
    print(f"  All settled:     {'yes' if summary['all_settled'] else 'NO'}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="poisongame",
        description="Inspect and maintain Poison Game match storage",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show", help="Show one match")
    show.add_argument("session_id", type=int, help="Session ID of the match")
    show.set_defaults(func=cmd_show)

    list_cmd = subparsers.add_parser("list", help="List stored matches")
    list_cmd.set_defaults(func=cmd_list)

    purge = subparsers.add_parser("purge", help="Delete expired match records")
    purge.set_defaults(func=cmd_purge)

    simulate = subparsers.add_parser("simulate", help="Play random matches locally")
    simulate.add_argument(
        "--variant",
        choices=[v.value for v in RulesVariant],
        default=RulesVariant.RACE.value,
        help="Rules variant (default: race)",
    )
    simulate.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility",
    )
    simulate.add_argument(
        "--games",
        type=int,
        default=10,
        help="Number of matches to play (default: 10)",
    )
    simulate.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON",
    )
    simulate.set_defaults(func=cmd_simulate)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Entry point for the `poisongame` command."""
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
