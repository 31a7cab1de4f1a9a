"""SQLite engine and session helpers for the club database."""

import logging
from contextlib import contextmanager
from typing import Generator, Iterator, Optional

from sqlalchemy import create_engine, event, Engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base

from clubdash.config.settings import Settings, get_settings, set_settings

logger = logging.getLogger(__name__)

Base = declarative_base()

_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def _configure_sqlite(engine: Engine, busy_timeout_ms: int) -> None:
    """
    Tune every new SQLite connection.

    Dashboard producers read on worker threads while requests write, so
    file databases run in WAL mode and wait on locks instead of failing.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
        if engine.url.database not in (None, "", ":memory:"):
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()


def get_engine() -> Engine:
    """Get or create the engine for the configured database URL."""
    global _engine
    if _engine is None:
        settings = get_settings()
        url = settings.get_database_url()
        _engine = create_engine(url, connect_args={"check_same_thread": False}, echo=False)
        if _engine.dialect.name == "sqlite":
            _configure_sqlite(_engine, settings.sqlite_busy_timeout_ms)
        logger.info("Database engine created: %s", _engine.url.render_as_string(hide_password=True))
    return _engine


def get_session_factory() -> sessionmaker:
    """Get or create the session factory bound to the current engine."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session that is rolled back on error and always closed."""
    db = get_session_factory()()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency that provides a request-scoped session."""
    with session_scope() as db:
        yield db


def init_db() -> Engine:
    """Create every club table on the configured database."""
    from clubdash.repositories.sqlalchemy import orm_models  # noqa: F401

    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    return engine


def configure_database(settings: Settings) -> Engine:
    """Switch to the database described by settings and create its tables."""
    set_settings(settings)
    reset_database()
    return init_db()


def reset_database() -> None:
    """Dispose the engine so the next use reads the current settings."""
    global _engine, _SessionLocal

    if _engine is not None:
        _engine.dispose()

    _engine = None
    _SessionLocal = None
