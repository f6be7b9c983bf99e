"""
db/session.py

Lazy SQLAlchemy engine and session factory for the product store.
"""

from __future__ import annotations

from collections.abc import Generator
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.config import DatabaseSettings, get_database_settings


def create_db_engine(settings: DatabaseSettings) -> Engine:
    return create_engine(
        settings.url,
        echo=settings.echo,
        pool_pre_ping=True,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_recycle=settings.pool_recycle_seconds,
    )


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Shared engine, built from DATABASE_URL on first use."""
    return create_db_engine(get_database_settings())


@lru_cache(maxsize=1)
def _session_factory() -> sessionmaker[Session]:
    return sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False)


def SessionLocal() -> Session:
    return _session_factory()()


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency: one session per request, closed afterwards.
    """

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
