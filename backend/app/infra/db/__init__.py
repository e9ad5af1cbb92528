"""Database connection helpers.

The process holds a single SQLAlchemy engine (and therefore a single pool)
that is opened at startup and disposed at shutdown.
"""

from __future__ import annotations

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from ...config import load_settings
from ..logging import get_logger

__all__ = ["connect_engine", "dispose_engine", "get_engine"]

logger = get_logger(__name__)

_engine: Engine | None = None


def connect_engine(database_url: str) -> Engine:
    """Create the process-wide engine and verify the store is reachable.

    Any connection failure propagates so the caller can refuse to serve.
    """

    global _engine
    if _engine is not None:
        return _engine
    engine = create_engine(database_url, echo=False, future=True, pool_pre_ping=True)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:
        engine.dispose()
        raise
    logger.info("entry_store_connected", extra={"dialect": engine.dialect.name})
    _engine = engine
    return engine


def get_engine() -> Engine:
    """Return the shared engine, connecting from settings when needed."""

    if _engine is None:
        settings = load_settings()
        if not settings.database_url:
            raise RuntimeError("database url is not configured")
        return connect_engine(settings.database_url)
    return _engine


def dispose_engine() -> None:
    """Release the shared engine and every pooled connection."""

    global _engine
    if _engine is None:
        return
    _engine.dispose()
    _engine = None
    logger.info("entry_store_disconnected")
