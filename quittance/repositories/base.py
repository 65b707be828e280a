from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import Executable
from sqlalchemy.ext.asyncio import AsyncSession

class BaseRepository:
    """
    Base class for repositories providing common helpers.

    Repositories never decide who may see a row; callers pass the identity and
    the ownership rules from quittance.services.ownership shape the queries.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def execute(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute a SQLAlchemy statement."""
        return await self.session.execute(statement, params or {})

    async def scalars(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return scalars."""
        result = await self.execute(statement, params)
        return result.scalars()

    async def scalar_one_or_none(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return a single scalar or None."""
        result = await self.execute(statement, params)
        return result.scalar_one_or_none()

    async def commit(self) -> None:
        """Commit current transaction."""
        await self.session.commit()

    async def rollback(self) -> None:
        """Roll back current transaction."""
        await self.session.rollback()

    async def flush(self) -> None:
        """Send pending changes without committing."""
        await self.session.flush()

    async def add(self, entity: Any) -> None:
        """Add a single entity to session."""
        self.session.add(entity)

    async def save(self, entity: Any) -> Any:
        """Add an entity and commit, rolling back on failure."""
        self.session.add(entity)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return entity

    async def remove(self, entity: Any) -> None:
        """Delete an entity and commit; database cascades remove dependents."""
        await self.session.delete(entity)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
