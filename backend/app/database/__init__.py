"""
Database engine, session factory, and metadata shared across the application.
"""

from __future__ import annotations

import logging
from typing import Generator, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker

from .engines import build_engine

logger = logging.getLogger(__name__)

Base: DeclarativeMeta = declarative_base()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False)

_engine: Optional[Engine] = None


def get_engine() -> Engine:
    """Return the process engine, creating it on first use."""
    global _engine
    if _engine is None:
        _engine = build_engine()
        SessionLocal.configure(bind=_engine)
    return _engine


def get_db() -> Generator[Session, None, None]:
    """Get database session with proper cleanup."""
    get_engine()
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


__all__ = [
    "Base",
    "SessionLocal",
    "get_db",
    "get_engine",
]
