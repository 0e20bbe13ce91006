"""Database engine and session management."""

import logging
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session as SQLAlchemySession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import Config
from .models import Base

logger = logging.getLogger(__name__)


def build_engine(database_url: str | None = None) -> Engine:
    """Create an engine for ``database_url`` (defaults to ``Config.DATABASE_URL``)."""
    url = database_url or Config.get_database_url()
    echo = Config.is_debug()

    if url.startswith("sqlite"):
        # SQLite needs special handling for check_same_thread; in-memory
        # databases must share one connection across threads.
        kwargs = {"connect_args": {"check_same_thread": False}, "echo": echo}
        if ":memory:" in url:
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)

    return create_engine(
        url,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        echo=echo,
    )


def init_db(engine: Engine) -> None:
    """Create any missing tables."""
    Base.metadata.create_all(bind=engine)
    logger.info(f"Database initialized: {engine.url.render_as_string(hide_password=True)}")


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[SQLAlchemySession, None, None]:
    """Transactional scope: commit on success, roll back on error.

    Usage:
        with session_scope(factory) as db:
            db.query(...)
    """
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
