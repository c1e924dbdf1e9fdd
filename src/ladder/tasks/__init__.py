"""Scheduled rating maintenance jobs and the lock that serialises them."""

from ladder.tasks.jobs import (
    DEFAULT_JOBS,
    JOBS,
    SCHEDULES,
    JobOutcome,
    RatingSweep,
    execute_job,
    resolve_jobs,
    run_hard_reset,
    run_monthly_soft_reset,
    run_weekly_decay,
)
from ladder.tasks.locks import advisory_lock_key, maintenance_lock, postgres_advisory_lock

__all__ = [
    "DEFAULT_JOBS",
    "JOBS",
    "SCHEDULES",
    "JobOutcome",
    "RatingSweep",
    "advisory_lock_key",
    "execute_job",
    "maintenance_lock",
    "postgres_advisory_lock",
    "resolve_jobs",
    "run_hard_reset",
    "run_monthly_soft_reset",
    "run_weekly_decay",
]
