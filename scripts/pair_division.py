#!/usr/bin/env python3
"""
Print the pairings for a division's signed-in players.

Usage:
    python scripts/pair_division.py --division-id 7
    python scripts/pair_division.py --division-id 7 --strategy nearest_rating
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Add src to path so this script can be run directly
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ladder.config import settings
from ladder.db import LadderRepository, get_session
from ladder.engine import LadderError, PairingStrategy
from ladder.services import MatchmakingService


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Pair a division's signed-in players for the next round.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--division-id", type=int, required=True, help="Division to pair.")
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in PairingStrategy],
        default=None,
        help=f"Pairing strategy (default: {settings.default_pairing_strategy}).",
    )
    return parser


def main() -> int:
    args = _build_parser().parse_args()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        with get_session() as session:
            pairings = MatchmakingService(session).pair_division(args.division_id, args.strategy)
            repo = LadderRepository(session)
            for number, pairing in enumerate(pairings, start=1):
                p1 = repo.require_player(pairing.player1_id)
                p2 = repo.require_player(pairing.player2_id)
                print(f"{number:>3}. {p1.name} ({p1.rating})  vs  {p2.name} ({p2.rating})")
    except LadderError as exc:
        print(f"ERROR: {exc}")
        return 1

    print(f"{len(pairings)} pairings")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
