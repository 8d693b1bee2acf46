# =============================================================================
# lib/database.py - SQLAlchemy Engine and Session Factory
# =============================================================================
# Single engine per process plus a session factory.
#
# Usage:
#   from lib.database import get_db, SessionLocal
#
#   @router.get("/things")
#   def list_things(db: Session = Depends(get_db)):
#       ...
#
#   with session_scope() as db:      # workers / scripts
#       ...
# =============================================================================

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy import DateTime, create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.types import TypeDecorator

from app.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


# =============================================================================
# Time Helpers
# =============================================================================

def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    DateTime column that always round-trips as aware UTC.

    Values are stored naive (UTC) so SQLite and Postgres behave the same,
    and come back with tzinfo=UTC attached.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


# =============================================================================
# Engine / Sessions
# =============================================================================

def create_db_engine(url: str, echo: bool = False) -> Engine:
    """
    Build an engine for the given URL.

    In-memory SQLite uses a StaticPool so every session shares one
    connection (and therefore one database).
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)

    # pool_size=5: maintain 5 connections ready
    # max_overflow=10: allow 10 extra connections under load
    return create_engine(
        url,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        echo=echo,
    )


engine = create_db_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def init_db(bind: Engine | None = None) -> None:
    """Create all tables that don't exist yet."""
    # Registers the mapped classes on Base.metadata
    import core.tables  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ensured")


def get_db() -> Iterator[Session]:
    """
    Dependency for FastAPI route injection.

    Services commit explicitly; anything left uncommitted is rolled back
    when the request ends.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Context manager for database sessions outside request handling.

    Usage:
        with session_scope() as db:
            ReminderService.send_interview_reminders(db)
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def check_connection(db: Session) -> bool:
    """Run SELECT 1 against the database."""
    result = db.execute(text("SELECT 1"))
    return result.scalar() == 1
