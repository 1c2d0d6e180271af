"""Database engine factory."""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from app.core.config import settings

logger = logging.getLogger(__name__)

_BASE_CONNECT_ARGS: dict[str, Any] = {
    "keepalives": 1,
    "keepalives_idle": 15,
    "keepalives_interval": 5,
    "keepalives_count": 3,
    "connect_timeout": 5,
    "application_name": "scheduler_api",
}


def _build_connect_args(*, statement_timeout_ms: int) -> dict[str, Any]:
    args = dict(_BASE_CONNECT_ARGS)
    if statement_timeout_ms > 0:
        args["options"] = f"-c statement_timeout={statement_timeout_ms}"
    return args


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    # SQLite ships with FK enforcement off; cascades on user delete rely on it
    @event.listens_for(engine, "connect")  # type: ignore[untyped-decorator]
    def _on_connect(dbapi_connection: Any, _connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _add_pool_events(engine: Engine) -> None:
    @event.listens_for(engine, "checkout")  # type: ignore[untyped-decorator]
    def _on_checkout(
        _dbapi_connection: Any, _connection_record: Any, _connection_proxy: Any
    ) -> None:
        logger.debug("Connection checked out from pool")

    @event.listens_for(engine, "checkin")  # type: ignore[untyped-decorator]
    def _on_checkin(_dbapi_connection: Any, _connection_record: Any) -> None:
        logger.debug("Connection returned to pool")


def build_engine(db_url: Optional[str] = None) -> Engine:
    """
    Create an engine for the configured database.

    PostgreSQL gets a bounded QueuePool with a statement timeout so that a
    long batch write is capped like any other call. SQLite (local runs and
    tests) gets FK enforcement; in-memory URLs share a single connection.
    """
    url = make_url(settings.get_database_url(db_url))

    if url.get_backend_name() == "sqlite":
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **kwargs)
        _enable_sqlite_foreign_keys(engine)
    else:
        engine = create_engine(
            url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,
            pool_recycle=30,
            connect_args=_build_connect_args(
                statement_timeout_ms=settings.database_statement_timeout_ms
            ),
        )

    _add_pool_events(engine)
    logger.info("Database engine created for %s", url.render_as_string(hide_password=True))
    return engine
