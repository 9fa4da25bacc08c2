import logging
from contextlib import contextmanager
from functools import lru_cache

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session

from resumeflow.core.config import get_settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_engine():
    """
    Build the process-wide engine (connection pool) on first use.
    pool_size=5: maintain 5 connections ready
    max_overflow=10: allow 10 extra connections under load
    """
    settings = get_settings()
    return create_engine(
        settings.database_url,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        echo=settings.database_echo
    )


@lru_cache()
def get_session_factory() -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


@contextmanager
def get_db_session():
    """
    Context manager for database sessions outside of requests.
    Usage:
        with get_db_session() as db:
            db.execute(text("SELECT 1"))
    """
    session = get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db():
    """
    Dependency for FastAPI route injection - one session per request.
    Repositories commit their own writes.
    Usage:
        @app.get("/resumes")
        def list_resumes(db: Session = Depends(get_db)):
            ...
    """
    db: Session = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def test_postgres_connection() -> bool:
    """
    Test if PostgreSQL is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        with get_db_session() as db:
            row = db.execute(text("SELECT 1 as test")).fetchone()
            return row[0] == 1
    except Exception as e:
        logger.warning("PostgreSQL connection failed: %s", e)
        return False
