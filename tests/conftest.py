"""
tests/conftest.py -- Shared fixtures for the Quittance test-suite.

This module provides:
  - hasher / token_service: cheap-to-build auth primitives for unit tests
  - run_db: drives a coroutine against a fresh in-memory SQLite database
  - api_client: TestClient over the real app with a patched lifespan

The in-memory database uses aiosqlite with a StaticPool so every session of a
test shares one connection (and therefore one schema). Foreign keys are
enabled per connection by quittance.db.session.build_engine, so ON DELETE
CASCADE behaves as on PostgreSQL.

DEBUG must be set before quittance.api.main is imported: the module reads
AppSettings at import and, without DEBUG, refuses to start without a
JWT_SECRET_KEY.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable
from uuid import uuid4

os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from quittance.api.main import app
from quittance.core.security import CredentialHasher, TokenConfig, TokenService
from quittance.db import Base, build_engine, build_session_maker
from quittance.db.models import User

MEMORY_URL = "sqlite+aiosqlite://"
TEST_SECRET = "test-secret-key-with-at-least-32-characters"

# Argon2 with minimal cost keeps the suite fast; parameters travel inside the digest.
_HASHER = CredentialHasher(memory_cost=1024, time_cost=1, parallelism=1)

SessionMaker = async_sessionmaker[AsyncSession]


@pytest.fixture(scope="session")
def hasher() -> CredentialHasher:
    return _HASHER


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(TokenConfig(secret_key=TEST_SECRET))


async def _create_schema(url: str = MEMORY_URL):
    engine = build_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return engine


@pytest.fixture
def run_db() -> Callable[[Callable[[SessionMaker], Awaitable[Any]]], Any]:
    """Return a runner: run_db(fn) awaits fn(session_maker) on a fresh database.

    Each call gets its own engine and event loop (asyncio.run), so tests
    stay synchronous and need no async plugin.
    """

    def _run(fn: Callable[[SessionMaker], Awaitable[Any]]) -> Any:
        async def _main() -> Any:
            engine = await _create_schema()
            try:
                return await fn(build_session_maker(engine))
            finally:
                await engine.dispose()

        return asyncio.run(_main())

    return _run


def _patch_lifespan():
    """Return a lifespan that wires an in-memory database and test auth services into app.state.

    Replaces the real startup: no connectivity probe, no Alembic (tables come
    from Base.metadata), a fixed signing key and a low-cost hasher.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        engine = await _create_schema()
        app.state.engine = engine
        app.state.session_maker = build_session_maker(engine)
        app.state.token_service = TokenService(TokenConfig(secret_key=TEST_SECRET))
        app.state.hasher = _HASHER
        yield
        await engine.dispose()

    return test_lifespan


@pytest.fixture(scope="module")
def api_client() -> Generator[TestClient, None, None]:
    """Yield a TestClient over the real app backed by a module-private database."""
    app.router.lifespan_context = _patch_lifespan()
    with TestClient(app, raise_server_exceptions=True) as client:
        yield client


async def create_user(session: AsyncSession, name: str = "user") -> User:
    """Insert an account directly; the digest is irrelevant outside the auth tests."""
    user = User(email=f"{name}-{uuid4().hex[:8]}@example.com", password_hash="unused", name=name)
    session.add(user)
    await session.commit()
    return user
