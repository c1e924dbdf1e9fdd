"""
Scheduled rating maintenance jobs.

The jobs are thin wrappers around the engine's batch transforms: load a
snapshot of every player, compute the changes, write them back. Which
day they run on is decided by an external scheduler (cron); SCHEDULES
holds the expressions it is expected to use.

- weekly_decay: every Sunday, decay players idle more than a week
- monthly_soft_reset: first of the month, regress everyone toward 1500
- hard_reset: manual only, put everyone back at 1500

Decay is not idempotent within a week: running weekly_decay twice before
the next Sunday decays inactive players twice.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Iterable, Optional

from sqlalchemy.orm import Session

from ladder.config import settings
from ladder.db.repository import LadderRepository
from ladder.db.session import get_session
from ladder.engine.decay import apply_decay, apply_hard_reset, apply_regression
from ladder.engine.snapshots import RatingChange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RatingSweep:
    """The rating changes one job computed, and how many it wrote."""

    changes: tuple[RatingChange, ...]
    players_scanned: int
    players_written: int

    @property
    def players_changed(self) -> int:
        return sum(1 for c in self.changes if c.delta != 0)

    @property
    def total_rating_delta(self) -> int:
        return sum(c.delta for c in self.changes)

    def summary(self) -> dict[str, int]:
        return {
            "players_scanned": self.players_scanned,
            "players_changed": self.players_changed,
            "players_written": self.players_written,
            "total_rating_delta": self.total_rating_delta,
        }


@dataclass(frozen=True)
class JobOutcome:
    """A sweep, or the error that stopped it."""

    job_name: str
    elapsed_s: float
    sweep: Optional[RatingSweep] = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def status(self) -> str:
        return "failed" if self.failed else "success"

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_name": self.job_name,
            "status": self.status,
            "elapsed_s": round(self.elapsed_s, 3),
            **(self.sweep.summary() if self.sweep else {}),
            "error": self.error,
        }


JobRunner = Callable[[Session, date, bool], RatingSweep]


def _sweep(session: Session, changes: list[RatingChange], scanned: int, dry_run: bool) -> RatingSweep:
    written = 0
    if changes and not dry_run:
        players = LadderRepository(session).lock_players(c.player_id for c in changes)
        for change in changes:
            players[change.player_id].rating = change.rating_after
        session.flush()
        written = len(changes)
    return RatingSweep(changes=tuple(changes), players_scanned=scanned, players_written=written)


def _load_players(session: Session):
    return [p.to_snapshot() for p in LadderRepository(session).all_players()]


def run_weekly_decay(session: Session, today: date, dry_run: bool = False) -> RatingSweep:
    """Decay every player inactive for longer than the configured grace period."""
    logger.info("Running weekly decay as of %s", today)
    players = _load_players(session)
    changes = apply_decay(
        players,
        today,
        inactive_days=settings.decay_inactive_days,
        factor=settings.decay_factor,
    )
    for change in changes:
        logger.debug(
            "Applied decay for player %s: %s -> %s",
            change.player_id, change.rating_before, change.rating_after,
        )
    logger.info("Weekly decay: %d of %d players decayed", len(changes), len(players))
    return _sweep(session, changes, len(players), dry_run)


def run_monthly_soft_reset(session: Session, today: date, dry_run: bool = False) -> RatingSweep:
    """Regress every player's rating halfway toward the default."""
    logger.info("[START] Soft reset for all players")
    players = _load_players(session)
    sweep = _sweep(session, apply_regression(players, settings.default_rating), len(players), dry_run)
    logger.info("[END] Soft reset for all players (%d players)", len(players))
    return sweep


def run_hard_reset(session: Session, today: date, dry_run: bool = False) -> RatingSweep:
    logger.info("[START] Hard reset for all players")
    players = _load_players(session)
    sweep = _sweep(session, apply_hard_reset(players, settings.default_rating), len(players), dry_run)
    logger.info("[END] Hard reset for all players (%d players)", len(players))
    return sweep


JOBS: dict[str, JobRunner] = {
    "weekly_decay": run_weekly_decay,
    "monthly_soft_reset": run_monthly_soft_reset,
    "hard_reset": run_hard_reset,
}

# hard_reset only runs when named explicitly
DEFAULT_JOBS = ("weekly_decay", "monthly_soft_reset")

SCHEDULES = {
    "weekly_decay": "0 0 * * SUN",
    "monthly_soft_reset": "0 0 1 * *",
}


def resolve_jobs(include: Optional[list[str]] = None, skip: Iterable[str] = ()) -> list[str]:
    """
    Job names to run, in order.

    Raises:
        KeyError: If any included name is not a known job
    """
    names = include or list(DEFAULT_JOBS)
    unknown = [name for name in names if name not in JOBS]
    if unknown:
        raise KeyError(f"Unknown job: {', '.join(unknown)}")
    skipped = set(skip)
    return [name for name in names if name not in skipped]


def execute_job(name: str, today: date, dry_run: bool = False, session_scope=get_session) -> JobOutcome:
    """
    Run one job in its own transaction.

    A job that raises is rolled back and reported as a failed outcome so
    the remaining jobs in a run still get their turn. Dry runs are
    rolled back even on success.
    """
    runner = JOBS[name]
    started = time.perf_counter()
    try:
        with session_scope() as session:
            sweep = runner(session, today, dry_run)
            if dry_run:
                session.rollback()
    except Exception as exc:
        logger.exception("Job %s failed", name)
        return JobOutcome(job_name=name, elapsed_s=time.perf_counter() - started, error=str(exc))
    return JobOutcome(job_name=name, elapsed_s=time.perf_counter() - started, sweep=sweep)
