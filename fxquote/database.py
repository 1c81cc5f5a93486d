"""
Database engine and session management.
The engine is built once at startup and handed to the quote cache.
"""
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from fxquote.config.settings import Settings
from fxquote.errors import ConfigurationError
from fxquote.models import Base

logger = logging.getLogger(__name__)


def create_db_engine(settings: Settings) -> Engine:
    """Create the engine for ``settings.database_url``."""
    connect_args = {}
    if settings.database_url.startswith("sqlite"):
        # Busy timeout for writers contending on the SQLite file lock
        connect_args = {"timeout": settings.database_timeout_seconds, "check_same_thread": False}
    return create_engine(
        settings.database_url,
        connect_args=connect_args,
        pool_pre_ping=True,
        echo=False,
    )


def init_db(engine: Engine):
    """Initialize database schema. Safe to call multiple times."""
    logger.info("Initializing database schema...")
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as exc:
        raise ConfigurationError(f"cannot initialize quote store: {exc}") from exc
    logger.info("Database schema initialized successfully")


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def session_scope(factory: sessionmaker) -> Session:
    """
    Context manager for database sessions.
    Commits on success, rolls back and re-raises on error.
    """
    session = factory()
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Database session error: {e}")
        raise
    finally:
        session.close()
