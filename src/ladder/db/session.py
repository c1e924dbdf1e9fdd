"""
Engine and session handling for the ladder store.

Services never commit. They flush into whatever session they are handed,
so a single get_session() block is one atomic unit of work:

    from ladder.db import get_session
    from ladder.services import MatchService

    with get_session() as session:
        MatchService(session).record_match(1, 2, 10, 5)
        # match row and both ratings commit together, or not at all
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from ladder.config import settings


def get_engine(database_url: Optional[str] = None) -> Engine:
    """
    Build an engine for the configured (or given) database URL.

    Pool sizing only applies to server databases; SQLite uses SQLAlchemy's
    default pool. SQL is echoed when LOG_LEVEL=DEBUG.
    """
    url = database_url or settings.database_url
    options = {
        "pool_pre_ping": True,
        "echo": settings.log_level == "DEBUG",
    }
    if not url.startswith("sqlite"):
        options["pool_size"] = settings.db_pool_size
        options["max_overflow"] = settings.db_max_overflow

    return create_engine(url, **options)


_engine: Optional[Engine] = None


def _shared_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = get_engine()
    return _engine


SessionLocal = sessionmaker(bind=_shared_engine(), autoflush=False, expire_on_commit=False)


@contextmanager
def get_session() -> Iterator[Session]:
    """
    Session scope for one unit of work.

    Commits when the block exits normally. Any exception rolls the whole
    block back and is re-raised.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
