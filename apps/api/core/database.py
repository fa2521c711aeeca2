"""
Database engine, session factory and the request-scoped session dependency.

Postgres in deployment (pooled), SQLite when DATABASE_URL points at it
(tests and local runs; one shared connection so an in-memory database
survives across sessions).

Services only add/flush; the request dependency owns commit and rollback,
so a failed adjustment never leaves a rewritten schedule without its
audit row.
"""
from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool
from sqlalchemy.exc import OperationalError
from core.config import settings
import logging
import time

logger = logging.getLogger(__name__)

CONNECT_ATTEMPTS = 3
CONNECT_BACKOFF_SECONDS = 0.1


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
            "echo": settings.DEBUG,
        }
    return {
        "poolclass": QueuePool,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_pre_ping": True,
        "echo": settings.DEBUG,
    }


engine = create_engine(settings.database_url, **_engine_options(settings.database_url))

# autoflush off: services flush explicitly before reading their own writes
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)

Base = declarative_base()


def _open_session() -> Session:
    """Session with a verified connection, retrying briefly on connect errors."""
    for attempt in range(1, CONNECT_ATTEMPTS + 1):
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
            return db
        except OperationalError as e:
            db.close()
            if attempt == CONNECT_ATTEMPTS:
                logger.error(f"Database unavailable after {CONNECT_ATTEMPTS} attempts: {e}")
                raise
            logger.warning(f"Database connection attempt {attempt} failed, retrying")
            time.sleep(CONNECT_BACKOFF_SECONDS * (2 ** (attempt - 1)))


def get_db() -> Session:
    """
    FastAPI dependency: one session per request.

    Commits when the endpoint returns, rolls back when it raises.
    """
    db = _open_session()
    try:
        yield db
        db.commit()
    except Exception as e:
        db.rollback()
        # API errors (404/403/422) are expected; only log real failures
        from fastapi import HTTPException
        if not isinstance(e, HTTPException):
            logger.error(f"Rolled back request transaction: {e}")
        raise
    finally:
        db.close()


def check_db_connection() -> bool:
    """True if the database answers a trivial query."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False
