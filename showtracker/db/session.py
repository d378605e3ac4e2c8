# showtracker/db/session.py
from __future__ import annotations

"""
ShowTracker — Database Engine, Sessions & Transactional Driver

- Async engine/session factory, created lazily on first use so importing the
  package never opens a connection (or needs a driver for a URL nobody uses).
- `transactional_async_session()` / `run_in_transaction(work)`: one session,
  one connection, one transaction per propagation run. Commit on success,
  rollback + re-raise on any error, connection always released.
- Nested runs are rejected; a second run on the same rows waits on the
  database's row locks instead of anything in process memory.
"""

from contextlib import asynccontextmanager
from contextvars import ContextVar
import logging
from typing import AsyncGenerator, Awaitable, Callable, Optional, TypeVar

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from showtracker.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")
SessionFactory = Callable[[], AsyncSession]

# ─────────────────────────────────────────────────────────────
# ⚡ ASYNC ENGINE (lazy)
# ─────────────────────────────────────────────────────────────
_engine: Optional[AsyncEngine] = None
_session_maker: Optional[async_sessionmaker[AsyncSession]] = None


def get_async_engine() -> AsyncEngine:
    """Create the async engine on first use."""
    global _engine
    if _engine is None:
        url = settings.ASYNC_DATABASE_URL
        kwargs = {"echo": settings.DB_ECHO, "pool_pre_ping": True, "future": True}
        if settings.is_postgres:
            kwargs.update(
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=settings.DB_MAX_OVERFLOW,
                pool_timeout=settings.DB_POOL_TIMEOUT,
                pool_recycle=settings.DB_POOL_RECYCLE,
            )
            if settings.DB_STATEMENT_TIMEOUT_MS:
                kwargs["connect_args"] = {
                    "server_settings": {"statement_timeout": str(settings.DB_STATEMENT_TIMEOUT_MS)}
                }
        _engine = create_async_engine(url, **kwargs)
        if url.startswith("sqlite"):
            _enable_sqlite_foreign_keys(_engine)
    return _engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Create the async session factory on first use."""
    global _session_maker
    if _session_maker is None:
        _session_maker = async_sessionmaker(
            bind=get_async_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_maker


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite ignores FKs (and ON DELETE CASCADE) unless asked per connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def _fk_pragma(dbapi_connection, connection_record):  # pragma: no cover (driver hook)
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


async def dispose_engine() -> None:
    """Close pooled connections (CLI shutdown, test teardown)."""
    global _engine, _session_maker
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_maker = None


# ─────────────────────────────────────────────────────────────
# 🔒 TRANSACTIONAL DRIVER
# ─────────────────────────────────────────────────────────────
_in_transaction: ContextVar[bool] = ContextVar("showtracker_in_transaction", default=False)


@asynccontextmanager
async def transactional_async_session(
    session_factory: Optional[SessionFactory] = None,
) -> AsyncGenerator[AsyncSession, None]:
    """Open a session and a transaction; commit on exit, rollback on error."""
    if _in_transaction.get():
        raise RuntimeError("Nested watch-status transactions are not supported")

    factory = session_factory or get_session_maker()
    token = _in_transaction.set(True)
    try:
        async with factory() as session:
            try:
                async with session.begin():
                    yield session
            except Exception:
                logger.warning("Transaction rolled back")
                raise
    finally:
        _in_transaction.reset(token)


async def run_in_transaction(
    work: Callable[[AsyncSession], Awaitable[T]],
    *,
    session_factory: Optional[SessionFactory] = None,
) -> T:
    """Run `work(session)` inside exactly one transaction and return its result.

    Every read and write `work` performs must go through the session it is
    handed, so the whole unit commits or rolls back together.
    """
    async with transactional_async_session(session_factory) as session:
        return await work(session)


async def db_healthcheck() -> bool:
    """Quick SELECT 1 to verify DB connectivity."""
    try:
        async with get_async_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("DB healthcheck failed")
        return False


__all__ = [
    "get_async_engine",
    "get_session_maker",
    "dispose_engine",
    "transactional_async_session",
    "run_in_transaction",
    "db_healthcheck",
]
