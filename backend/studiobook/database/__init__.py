"""
Engine, session factory and declarative base.

PostgreSQL in deployment; ``sqlite://`` (one shared in-memory connection)
in tests.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from studiobook.core.config import settings

logger = logging.getLogger(__name__)

POSTGRES_POOL_OPTIONS: Dict[str, Any] = {
    "pool_size": 5,
    "max_overflow": 10,
    "pool_timeout": 5,
    "pool_recycle": 300,
    "pool_pre_ping": True,
}


def build_engine(url: str, echo: bool = False) -> Engine:
    if url.startswith("sqlite"):
        options: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
    else:
        options = dict(POSTGRES_POOL_OPTIONS, connect_args={"application_name": "studiobook"})
    engine = create_engine(url, echo=echo, **options)
    logger.debug("Database engine created", extra={"dialect": engine.dialect.name})
    return engine


engine: Engine = build_engine(settings.database_url, settings.database_echo)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)

Base: DeclarativeMeta = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Yield a session; commit when the caller finishes cleanly, roll back otherwise."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


__all__ = ["Base", "SessionLocal", "build_engine", "engine", "get_db"]
