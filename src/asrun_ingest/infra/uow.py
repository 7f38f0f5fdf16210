"""
Unit of Work boundary for asrun-ingest.

Each ingested file, and each lookup request, runs inside one of these sessions.
"""

from __future__ import annotations

import contextlib
from collections.abc import Callable, Generator

from sqlalchemy.orm import Session

from .db import get_sessionmaker

SessionFactory = Callable[[], Session]


@contextlib.contextmanager
def session(factory: SessionFactory | None = None) -> Generator[Session, None, None]:
    """
    Database session context manager for batch jobs and CLI operations.

    Provides Unit of Work semantics:
    - Opens a DB session (from ``factory`` when given)
    - Yields it for use
    - On success: commits the transaction
    - On exception: rolls back and re-raises the exception
    - Always closes the session

    Usage:
        with session() as db:
            db.add(some_object)
    """
    db = (factory or get_sessionmaker())()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
