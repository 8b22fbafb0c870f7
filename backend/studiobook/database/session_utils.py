"""Dialect-aware helpers for the booking transaction."""

from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def get_dialect_name(session: Session, default: str = "sqlite") -> str:
    """Name of the dialect the session is bound to, or ``default`` when unbound."""
    bind = session.get_bind()
    dialect = getattr(bind, "dialect", None)
    return getattr(dialect, "name", None) or default


def set_local_statement_timeout(session: Session, timeout_ms: int) -> bool:
    """
    Bound every statement of the current transaction on PostgreSQL.

    Returns True when the timeout was applied. Other dialects are left alone.
    """
    if get_dialect_name(session) != "postgresql":
        return False
    session.execute(text(f"SET LOCAL statement_timeout = {int(timeout_ms)}"))
    logger.debug("Applied local statement_timeout", extra={"timeout_ms": timeout_ms})
    return True
