"""Database engine and session management.

Environment variables:
  OPS_DATABASE_URL — SQLAlchemy URL (default: sqlite:///data/operations.db)
"""
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from .models import Base

logger = logging.getLogger(__name__)

DEFAULT_DB_URL = "sqlite:///data/operations.db"


def get_database_url() -> str:
    return os.getenv("OPS_DATABASE_URL", DEFAULT_DB_URL)


def get_engine(url: Optional[str] = None, echo: bool = False):
    """Create SQLAlchemy engine and make sure the tables exist."""
    url = url or get_database_url()
    if url.startswith("sqlite:///") and ":memory:" not in url:
        Path(url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(url, echo=echo)

    if url.startswith("sqlite"):
        # Foreign keys are off by default in SQLite
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    init_db(engine)
    return engine


def get_session_factory(engine=None) -> sessionmaker:
    if engine is None:
        engine = get_engine()
    return sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def get_session(engine=None) -> Generator[Session, None, None]:
    """Context manager for database sessions with auto-commit/rollback."""
    factory = get_session_factory(engine)
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine) -> None:
    """Create all tables (idempotent)."""
    Base.metadata.create_all(engine)
    logger.debug("Operations tables ready.")
