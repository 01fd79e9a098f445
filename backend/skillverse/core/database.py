"""
Database configuration and session management for Skillverse.

Sets up SQLAlchemy engine, session factory, base model and the
unit-of-work helper used by every ledger mutation.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Generator, Iterator
from sqlalchemy import create_engine, MetaData, text
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
import logging

from .config import settings
from .exceptions import LedgerError, InternalError


# Configure logging
logger = logging.getLogger(__name__)


# SQLAlchemy metadata conventions for better constraint naming
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}

metadata = MetaData(naming_convention=convention)


# Create engine based on environment
if settings.TESTING:
    # Use in-memory SQLite for testing
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
elif settings.is_sqlite:
    engine = create_engine(
        settings.DATABASE_URL,
        connect_args={"check_same_thread": False},
        echo=settings.DEBUG,
    )
else:
    # Use PostgreSQL for development/production
    engine = create_engine(
        settings.DATABASE_URL,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=10,        # Number of connections to maintain
        max_overflow=20,     # Maximum overflow connections
        echo=settings.DEBUG, # Log SQL statements if in debug mode
    )


# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


# Base class for models
Base = declarative_base(metadata=metadata)


def utcnow() -> datetime:
    """Timezone-aware current time used for row timestamps."""
    return datetime.now(timezone.utc)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency to get database session.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session, operation: str) -> Iterator[Session]:
    """
    Run a block of ledger work as one all-or-nothing transaction.

    Commits when the block exits cleanly. Domain errors roll back and
    propagate unchanged; anything else rolls back, is logged with its
    traceback and is re-raised as a generic ``InternalError``.

    Args:
        db: Database session owning the transaction
        operation: Short name used in log lines

    Yields:
        Session: the same session
    """
    try:
        yield db
        db.commit()
    except LedgerError:
        db.rollback()
        raise
    except Exception as exc:
        db.rollback()
        logger.exception(f"{operation} failed, transaction rolled back")
        raise InternalError(f"Error during {operation}") from exc


def check_database_connection() -> bool:
    """
    Check if database is accessible.

    Returns:
        bool: True if database is accessible, False otherwise
    """
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False


class DatabaseManager:
    """
    Database manager for handling schema operations.
    """

    @staticmethod
    def create_all_tables():
        """Create all database tables."""
        # Import models so they register with the metadata
        import skillverse.models  # noqa: F401

        Base.metadata.create_all(bind=engine)
        logger.info("All database tables created successfully")

    @staticmethod
    def drop_all_tables():
        """Drop all database tables. USE WITH CAUTION!"""
        Base.metadata.drop_all(bind=engine)
        logger.warning("All database tables dropped")

