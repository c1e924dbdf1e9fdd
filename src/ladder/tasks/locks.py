"""
Advisory locks so that two maintenance runs never sweep ratings at once.

Decay is not idempotent, so a second overlapping weekly_decay would
decay every inactive player twice.
"""

from __future__ import annotations

import hashlib
import logging
import time
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

MAINTENANCE_LOCK_NAME = "ladder_rating_maintenance"


def advisory_lock_key(name: str) -> int:
    """Map a lock name onto PostgreSQL's signed bigint lock key space."""
    digest = hashlib.sha256(name.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], byteorder="big", signed=True)


def _try_lock(connection: Connection, key: int) -> bool:
    return bool(connection.execute(text("SELECT pg_try_advisory_lock(:key)"), {"key": key}).scalar())


@contextmanager
def postgres_advisory_lock(
    engine: Engine,
    *,
    key: int,
    timeout_seconds: float = 0.0,
    poll_interval_seconds: float = 1.0,
) -> Iterator[bool]:
    """
    Hold a session-level PostgreSQL advisory lock for the body of the block.

    With timeout_seconds=0 a single attempt is made. Otherwise the lock is
    polled until the deadline passes.

    Raises:
        TimeoutError: If another session still holds the lock
    """
    deadline = time.monotonic() + max(timeout_seconds, 0.0)
    with engine.connect() as connection:
        acquired = _try_lock(connection, key)
        while not acquired and time.monotonic() < deadline:
            time.sleep(max(poll_interval_seconds, 0.05))
            acquired = _try_lock(connection, key)

        if not acquired:
            raise TimeoutError(f"Another maintenance run holds advisory lock {key}")

        logger.debug("Acquired advisory lock %s", key)
        try:
            yield True
        finally:
            connection.execute(text("SELECT pg_advisory_unlock(:key)"), {"key": key})
            logger.debug("Released advisory lock %s", key)


@contextmanager
def maintenance_lock(
    engine: Engine,
    name: str = MAINTENANCE_LOCK_NAME,
    timeout_seconds: float = 0.0,
) -> Iterator[bool]:
    """
    Hold the maintenance lock while decay/reset jobs run.

    Only PostgreSQL has advisory locks. SQLite (development and tests)
    allows a single writer anyway, so the lock is a no-op there.
    """
    if engine.dialect.name != "postgresql":
        logger.debug("No advisory locks on %s; running %s unlocked", engine.dialect.name, name)
        yield True
        return

    with postgres_advisory_lock(engine, key=advisory_lock_key(name), timeout_seconds=timeout_seconds) as acquired:
        yield acquired
