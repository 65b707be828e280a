from __future__ import annotations

import asyncio

from alembic import context
from sqlalchemy import event, pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from quittance.db import models  # noqa: F401  (registers tables on Base.metadata)
from quittance.db.base import Base
from quittance.db.config import get_settings, to_async_url
from quittance.db.session import enable_sqlite_foreign_keys

# Alembic Config object; provides access to the values within the .ini in use.
config = context.config

settings = get_settings()
target_metadata = Base.metadata


def _database_url() -> str:
    # run_migrations sets sqlalchemy.url; fall back to settings when invoked otherwise.
    return config.get_main_option("sqlalchemy.url") or settings.sync_database_url


def run_migrations_offline() -> None:
    """
    Run migrations in 'offline' mode.
    This configures the context with just a URL and not an Engine.
    """
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """
    Run migrations in 'online' mode using an async engine.
    """
    async_url = to_async_url(_database_url())
    connectable: AsyncEngine = create_async_engine(async_url, poolclass=pool.NullPool)
    if async_url.startswith("sqlite"):
        event.listen(connectable.sync_engine, "connect", enable_sqlite_foreign_keys)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
