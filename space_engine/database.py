"""
Database configuration and session management.

Provides:
- Engine creation with dialect-specific configuration
- Session factory construction
- Context-managed sessions with commit/rollback
- Database initialization utilities

Engines and session factories are built explicitly and handed to the
stores that need them; nothing here is created at import time.
"""

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from space_engine.config import Settings

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    """Enable foreign key constraints on every SQLite connection."""

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine configured for the database type.

    Args:
        database_url: SQLAlchemy connection URL
        echo: Log SQL statements

    Returns:
        Engine: Configured SQLAlchemy engine
    """
    if "sqlite" in database_url.lower():
        kwargs = {
            "connect_args": {"check_same_thread": False},
            "echo": echo,
        }
        if ":memory:" in database_url or database_url.rstrip("/").endswith("sqlite:"):
            # In-memory databases live on a single connection
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, **kwargs)
        _enable_sqlite_foreign_keys(engine)
        return engine

    # PostgreSQL-specific configuration
    return create_engine(
        database_url,
        pool_size=5,  # Maximum number of connections in pool
        pool_recycle=3600,  # Recycle connections after 1 hour
        pool_pre_ping=True,  # Test connections before using them
        echo=echo,
    )


def create_engine_from_settings(settings: Settings) -> Engine:
    """Create the engine described by application settings."""
    if settings.is_production:
        settings.validate_production_config()
    return create_db_engine(settings.database_url, echo=settings.log_level == "DEBUG")


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """
    Create a session factory bound to an engine.

    Sessions keep loaded attributes after commit so records can be
    mapped once the transaction has closed.
    """
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


@contextmanager
def get_db_context(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Usage:
        with get_db_context(factory) as db:
            listing = db.get(Listing, listing_id)
            listing.title = "Updated"
            # Automatic commit on context exit

    Yields:
        Session: SQLAlchemy database session
    """
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(engine: Engine) -> None:
    """
    Initialize database by creating all tables.

    Useful for development and testing. In production, use Alembic migrations.
    """
    from space_engine.models.base import Base

    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")


def check_connection(engine: Engine) -> bool:
    """
    Test database connection.

    Returns:
        bool: True if connection successful, False otherwise
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection successful")
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False
