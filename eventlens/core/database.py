"""Database configuration and session management for SQLite.

This module configures the SQLite database engine with settings suited to
a web application that also writes from background worker threads: WAL
mode for concurrent access and foreign key enforcement for data integrity.

SQLite Configuration Choices:
    - **WAL (Write-Ahead Logging)**: Allows concurrent readers while writing.
      Photo ingestion jobs commit face matches from worker threads while
      request handlers keep reading events and photos.

    - **Foreign Keys**: Disabled by default in SQLite. Enabled so that, for
      example, an Invitee can never point at a missing Event.

    - **check_same_thread=False**: Sessions are opened in request handlers
      and in ingestion worker threads, each on its own connection, but the
      pool may hand a connection to a different thread than created it.
"""

import logging

from sqlalchemy import event as sa_event
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from eventlens.core.config import settings
from eventlens.core.errors import PersistenceError

logger = logging.getLogger(__name__)

connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)


@sa_event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection.

    These settings are connection-level, not database-level, so they must
    be set each time a new connection is established from the pool.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_and_tables():
    """Create all database tables."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency for getting database session."""
    with Session(engine) as session:
        yield session


def commit(session: Session) -> None:
    """Commit the session as one atomic write.

    Backend errors are rolled back and re-raised as ``PersistenceError`` so
    no store-specific exception shape reaches callers.
    """
    try:
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Commit failed: {e}")
        raise PersistenceError("Failed to save changes") from e
