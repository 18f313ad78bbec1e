"""
Database engine and session management for mdd_rest.
"""

import logging
from collections.abc import Generator

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from mdd_rest.config import settings

logger = logging.getLogger(__name__)


def create_db_engine(database_url: str | None = None, echo: bool | None = None) -> Engine:
    """Create a SQLAlchemy engine.

    SQLite engines are made usable across the threads FastAPI dispatches
    sync work to; in-memory SQLite shares a single connection so every
    session sees the same database.

    Args:
        database_url: SQLAlchemy URL. Defaults to settings.
        echo: Log emitted SQL. Defaults to settings.

    Returns:
        The configured engine
    """
    url = database_url or settings.database_url
    kwargs: dict = {
        "echo": settings.database_echo if echo is None else echo,
        "pool_pre_ping": True,
    }

    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url:
            kwargs["poolclass"] = StaticPool

    logger.debug(f"Creating database engine for {url}")
    return create_engine(url, **kwargs)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create the per-request session factory bound to ``engine``."""
    return sessionmaker(bind=engine, expire_on_commit=False)


def session_scope(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """Yield a session, committing on success and rolling back on error."""
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def ping(engine: Engine) -> bool:
    """Check if the database is reachable."""
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"Database ping failed: {e}")
        return False
