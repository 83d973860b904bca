"""
SQLAlchemy base configuration and session management.

Uses SQLAlchemy 2.0 style with type hints and declarative base.
Designed to be portable between SQLite (dev) and PostgreSQL (prod).
Unique indexes on natural keys (airline/airport codes, tail numbers) are
the only concurrency control the resolvers rely on, so both backends must
enforce them.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session

from hangar.config import config


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    """Naive UTC timestamp; all DateTime columns store UTC without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    """Serialize a stored (naive UTC) datetime as ISO-8601 with a Z suffix."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat() + 'Z'


def make_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine with configuration appropriate for the database type."""
    engine_kwargs = {
        'echo': echo,  # Log SQL in debug mode
    }

    is_sqlite = url.startswith('sqlite')
    if is_sqlite:
        # Resolvers run on worker threads (parallel airports, photo refresh)
        engine_kwargs['connect_args'] = {'check_same_thread': False, 'timeout': 15}

    new_engine = create_engine(url, **engine_kwargs)

    # Enable SQLite optimizations via PRAGMA statements
    if is_sqlite:
        @event.listens_for(new_engine, 'connect')
        def set_sqlite_pragma(dbapi_connection, connection_record):
            """
            Configure SQLite for concurrent request handling.

            WAL mode allows concurrent reads during writes, which matters
            when two flight creations resolve the same entities at once.
            """
            cursor = dbapi_connection.cursor()
            cursor.execute('PRAGMA journal_mode=WAL')
            cursor.execute('PRAGMA synchronous=NORMAL')
            cursor.execute('PRAGMA foreign_keys=ON')
            cursor.close()

    return new_engine


def make_session_factory(bind: Engine) -> sessionmaker:
    """Session factory used by every service; objects stay usable after commit."""
    return sessionmaker(
        bind=bind,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,  # Avoid lazy loading issues
    )


engine = make_engine(config.database.url, echo=config.debug)

# Session factory
SessionLocal = make_session_factory(engine)


@contextmanager
def get_session(session_factory: sessionmaker = None) -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Usage:
        with get_session() as session:
            session.query(...)

    Automatically handles commit/rollback and session cleanup.
    """
    session = (session_factory or SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(bind: Engine = None) -> None:
    """
    Initialize database schema.

    Creates all tables if they don't exist. For production,
    use Alembic migrations instead.
    """
    Base.metadata.create_all(bind=bind or engine)
