"""SQLAlchemy database setup for the Note Board local cache."""

import os
from pathlib import Path
from typing import Final

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from noteboard.utils import get_app_data_path

#: The default database name.
DEFAULT_DB_NAME: Final[str] = "cache.db"
#: Environment variable that overrides the database location.
DB_PATH_ENV: Final[str] = "NOTEBOARD_DB_PATH"


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""


def get_db_path() -> Path:
    """
    Get the path to the local cache database.

    - If ``NOTEBOARD_DB_PATH`` is set, use it.
    - Otherwise use ``cache.db`` in the application data directory.

    Returns:
        Path to the database file

    """
    if DB_PATH_ENV in os.environ:
        return Path(os.environ[DB_PATH_ENV])
    return get_app_data_path() / DEFAULT_DB_NAME


def create_engine_with_path(db_path: Path | None = None) -> Engine:
    """
    Create SQLAlchemy engine with proper SQLite settings.

    Args:
        db_path: Optional path to database file. If None, uses default path.

    Returns:
        SQLAlchemy engine

    """
    if db_path is None:
        db_path = get_db_path()

    db_path.parent.mkdir(parents=True, exist_ok=True)
    db_path.touch(exist_ok=True)

    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
        echo=False,  # Set to True for SQL debugging
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        """Set SQLite pragmas on connection."""
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return engine


def create_session(db_path: Path | None = None) -> Session:
    """
    Open a session on the cache database, creating the tables if needed.

    Args:
        db_path: Optional path to database file. If None, uses default path.

    Returns:
        SQLAlchemy session

    """
    # Register the models on Base.metadata before creating tables
    import noteboard.models  # noqa: F401, PLC0415

    engine = create_engine_with_path(db_path)
    Base.metadata.create_all(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return factory()
