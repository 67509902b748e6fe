"""
Database Session Management

SQLAlchemy engine and session factories.

Nothing is cached at module level: callers build an engine, hand the
session factory to whoever needs it, and dispose of the engine when done.
"""

import logging

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from rolegate.db.models import Base

logger = logging.getLogger("ROLEGATE_DB")


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """Create the database engine."""
    logger.debug(f"Creating engine with URL: {url[:60]}...")

    kwargs = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            # Share the single in-memory database across sessions
            kwargs["poolclass"] = StaticPool

    return create_engine(url, echo=echo, **kwargs)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create the session factory bound to `engine`."""
    return sessionmaker(
        bind=engine,
        class_=Session,
        expire_on_commit=False,
        autoflush=False,
    )


def init_db(engine: Engine) -> None:
    """Create tables that do not exist yet."""
    logger.info("Creating tables...")
    Base.metadata.create_all(engine)


def reset_db(engine: Engine) -> None:
    """Drop and recreate all tables."""
    logger.warning("Dropping all tables...")
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)


__all__ = [
    "create_db_engine",
    "create_session_factory",
    "init_db",
    "reset_db",
]
