#!/usr/bin/env python3
"""
Close a league's season: promote, demote and regress ratings.

Usage:
    python scripts/end_season.py --league-id 3
    python scripts/end_season.py --league-id 3 --dry-run
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Add src to path so this script can be run directly
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ladder.config import settings
from ladder.db import get_session
from ladder.engine import LadderError
from ladder.services import LeagueService


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run end-of-season promotion, demotion and rating regression.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--league-id", type=int, required=True, help="League to process.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute the transition but do not write to the database.",
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
            service = LeagueService(session)
            transition = service.end_season(args.league_id)

            for move in transition.reassignments:
                print(
                    f"  {move.reason:<10} player={move.player_id:<6} "
                    f"{move.from_division_id} -> {move.to_division_id}"
                )

            if args.dry_run:
                session.rollback()
                print("(dry run: changes rolled back)")
    except LadderError as exc:
        print(f"ERROR: {exc}")
        return 1

    print(f"Season closed: {transition.summary()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
