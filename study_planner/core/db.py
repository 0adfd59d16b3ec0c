"""
SQLAlchemy engine, session, and base for the database student store.
"""
import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base, Session
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()

DEFAULT_DB_URL = "sqlite://"

_engine = None
_SessionLocal = None
_db_url = None


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """Context manager for a single DB session. Commits on success, rolls back on error."""
    if _SessionLocal is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    session = _SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_engine():
    return _engine


def _is_memory_sqlite(db_url: str) -> bool:
    return db_url in ("sqlite://", "sqlite:///:memory:")


def init_db(db_url: Optional[str] = None) -> None:
    """
    Initialize database engine and create tables.
    db_url: SQLAlchemy URL; defaults to an in-memory SQLite database.
    The engine is process-global: once initialized, later calls keep it until dispose_db().
    """
    global _engine, _SessionLocal, _db_url

    db_url = db_url or DEFAULT_DB_URL

    if _engine is not None:
        if db_url != _db_url:
            logger.warning(f"Database already initialized with {_db_url.split('?')[0]}; ignoring {db_url.split('?')[0]}")
        else:
            logger.debug("Database already initialized")
        return

    _db_url = db_url

    if _is_memory_sqlite(db_url):
        # One shared connection, otherwise every pooled connection sees its own empty database
        _engine = create_engine(
            db_url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        _engine = create_engine(db_url, echo=False, future=True)

    # Import model module so tables are registered with Base
    from study_planner.core import models as _models  # noqa: F401

    Base.metadata.create_all(_engine)
    _SessionLocal = sessionmaker(bind=_engine, autocommit=False, autoflush=False, expire_on_commit=False)
    logger.info(f"Database initialized: {db_url.split('?')[0]}")


def dispose_db() -> None:
    """Drop the engine so a later init_db() starts from scratch."""
    global _engine, _SessionLocal, _db_url
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None
    _db_url = None
