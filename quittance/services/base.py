from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from quittance.services.ownership import OwnershipResolver


class BaseService:
    """
    Base class for services. Holds a session for use across multiple repositories
    and the ownership resolver that guards every single-resource access.

    Services keep business rules and authorization, delegating data access to
    repositories.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.ownership = OwnershipResolver(session)
