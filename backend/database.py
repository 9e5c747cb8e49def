# backend/database.py
"""
Database setup and session management for the Gateway Planner.
Uses SQLAlchemy 2.0. Only exported plans are persisted; planning sessions
live in memory.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool
from contextlib import contextmanager
from typing import Generator

from config import settings


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


# For SQLite, we need check_same_thread=False for FastAPI's threadpool
engine_kwargs = {}
if settings.database_url.startswith("sqlite"):
    engine_kwargs["connect_args"] = {"check_same_thread": False}
    # In-memory databases must share a single connection
    if settings.database_url in ("sqlite://", "sqlite:///:memory:"):
        engine_kwargs["poolclass"] = StaticPool

engine = create_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,  # Verify connections before using
    **engine_kwargs,
)

# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


def init_db() -> None:
    """
    Initialize the database by creating all tables.
    Called on application startup.
    """
    # Import all models to ensure they're registered with Base
    from models import orm  # noqa: F401

    Base.metadata.create_all(bind=engine)


@contextmanager
def get_db_session() -> Generator:
    """
    Context manager for database sessions.
    Ensures proper cleanup on exceptions.

    Usage:
        with get_db_session() as db:
            db.query(Model).all()
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
