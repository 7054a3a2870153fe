"""
SQLAlchemy engine factory with production-ready connection pooling.

Only used when DATABASE_URL is set; otherwise reservations live in the JSON file.
"""

from functools import lru_cache
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from str_access.config import DATABASE_URL
from str_access.models.base import Base


def create_db_engine(url: str) -> Engine:
    """
    Create an engine for ``url``.

    SQLite URLs (used in tests and single-box deployments) get no pool sizing;
    everything else gets the pooled production settings.
    """
    if url.startswith("sqlite"):
        return create_engine(url, future=True, connect_args={"check_same_thread": False})

    return create_engine(
        url,
        future=True,
        pool_size=10,  # Number of connections to maintain in the pool
        max_overflow=20,  # Additional connections when pool is exhausted
        pool_pre_ping=True,  # Verify connections before using (detect stale connections)
        pool_recycle=3600,  # Recycle connections after 1 hour
        echo=False,
    )


@lru_cache(maxsize=None)
def get_engine(url: Optional[str] = None) -> Engine:
    """Return the process-wide engine for ``url`` (defaults to DATABASE_URL)."""
    resolved = url or DATABASE_URL
    if not resolved:
        raise RuntimeError("DATABASE_URL is not set.")
    return create_db_engine(resolved)


def init_db(engine: Engine) -> None:
    """Create the reservation tables if they do not exist."""
    # Import registers the models on Base.metadata
    from str_access.models import reservations  # noqa: F401

    Base.metadata.create_all(engine)


def check_engine_health(engine: Engine) -> bool:
    """
    Check if database engine is healthy and connections are working.

    Returns:
        bool: True if database is reachable and healthy, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
