"""
Database engine and session management for the ledger.

One process-wide engine, configured once from a SQLAlchemy URL.  Report
code never opens sessions itself: callers own a ``Session`` (usually from
``session_scope``) and hand it to a selector.

``get_engine``, ``get_session`` and ``get_session_factory`` raise
``RuntimeError`` until ``init_engine_from_url`` has run.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from books_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_NOT_INITIALIZED = "Database engine not initialized; call init_engine_from_url() first."

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def _engine_options(url: URL, pool_size: int, max_overflow: int) -> dict[str, Any]:
    if url.get_backend_name() != "sqlite":
        return {
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_pre_ping": True,
            "pool_recycle": 1800,
        }
    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        # every session must see the same in-memory database
        options["poolclass"] = StaticPool
    return options


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 10,
    max_overflow: int = 5,
) -> Engine:
    """
    Create the engine and session factory for ``database_url``.

    Args:
        database_url: Any SQLAlchemy URL, e.g. ``sqlite:///:memory:`` or a
            PostgreSQL DSN.
        echo: Log every SQL statement.
        pool_size: Pooled connections (server databases only).
        max_overflow: Extra connections beyond ``pool_size``.
    """
    global _engine, _session_factory

    url = make_url(database_url)
    _engine = create_engine(url, echo=echo, **_engine_options(url, pool_size, max_overflow))
    _session_factory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "database_engine_ready",
        extra={"dialect": url.get_backend_name(), "database": url.database, "echo": echo},
    )
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Factory for independent sessions, one per concurrent report request."""
    if _session_factory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _session_factory


def get_session() -> Session:
    return get_session_factory()()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    A session that is rolled back and closed when the block ends.

    Reporting only reads, so nothing is ever committed here; an exception
    inside the block is logged and re-raised.
    """
    session = get_session()
    try:
        yield session
    except Exception:
        logger.warning("session_aborted", exc_info=True)
        raise
    finally:
        session.rollback()
        session.close()


def create_tables() -> None:
    """Create the ledger tables that do not exist yet."""
    from books_kernel.db.base import Base
    import books_kernel.models  # noqa: F401  registers the mapped tables

    Base.metadata.create_all(get_engine())


def drop_tables() -> None:
    """Drop every ledger table.  Test teardown only."""
    from books_kernel.db.base import Base
    import books_kernel.models  # noqa: F401

    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """Dispose of the engine and forget the session factory."""
    global _engine, _session_factory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None
