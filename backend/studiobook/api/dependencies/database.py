# backend/studiobook/api/dependencies/database.py
"""Request-scoped database session."""

from typing import Generator

from sqlalchemy.orm import Session

from ...database import get_db as _session_scope


def get_db() -> Generator[Session, None, None]:
    """Session committed after the handler returns; tests override this dependency."""
    yield from _session_scope()
