from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from .config import Settings, get_settings, to_async_url

logger = logging.getLogger(__name__)


def enable_sqlite_foreign_keys(dbapi_conn, connection_record) -> None:
    """
    Turn on FK enforcement for each new SQLite connection.

    SQLite ignores ON DELETE CASCADE unless this PRAGMA is set per connection.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# PUBLIC_INTERFACE
def build_engine(url: Optional[str] = None, settings: Optional[Settings] = None) -> AsyncEngine:
    """
    Create an AsyncEngine with a bounded connection pool.

    In-memory SQLite URLs get a StaticPool so every session sees the same database.
    """
    settings = settings or get_settings()
    async_url = to_async_url(url or settings.database_url)
    kwargs: Dict[str, Any] = {"echo": settings.SQL_ECHO}

    if async_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in async_url or "mode=memory" in async_url or async_url.endswith("://"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_pre_ping=True,
        )

    engine = create_async_engine(async_url, **kwargs)
    if async_url.startswith("sqlite"):
        event.listen(engine.sync_engine, "connect", enable_sqlite_foreign_keys)
    return engine


# PUBLIC_INTERFACE
def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory used for one session per request."""
    return async_sessionmaker(
        bind=engine, expire_on_commit=False, autoflush=False, autocommit=False
    )


# PUBLIC_INTERFACE
async def wait_for_database(
    engine: AsyncEngine,
    *,
    max_attempts: int,
    initial_delay: float,
    max_delay: float,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> None:
    """
    Probe the database until it answers, backing off exponentially between attempts.

    The delay starts at initial_delay and doubles up to max_delay. After
    max_attempts failures the last error is re-raised so startup aborts.
    """
    delay = initial_delay
    for attempt in range(1, max_attempts + 1):
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            if attempt > 1:
                logger.info("Database reachable after %d attempts", attempt)
            return
        except (SQLAlchemyError, OSError) as exc:
            if attempt == max_attempts:
                logger.error("Database unreachable after %d attempts; giving up", attempt)
                raise
            logger.warning(
                "Database connection attempt %d/%d failed (%s); retrying in %.1fs",
                attempt,
                max_attempts,
                type(exc).__name__,
                delay,
            )
            await sleep(delay)
            delay = min(delay * 2, max_delay)
