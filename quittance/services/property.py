from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from quittance.core.errors import NotFoundError, ValidationError
from quittance.db.models import Property
from quittance.repositories.property import PropertyRepository
from quittance.schemas.property import PropertyCreate, PropertyUpdate
from quittance.services.base import BaseService
from quittance.services.ownership import DirectOwner, OrganizationOwner, Owner, owner_of

logger = logging.getLogger(__name__)


class PropertyService(BaseService):
    """Properties owned directly by a user or through an organization."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = PropertyRepository(session)

    # PUBLIC_INTERFACE
    async def list_properties(self, identity_id: UUID, *, limit: int = 100, offset: int = 0) -> List[Property]:
        """Every property the identity owns or can reach through a membership."""
        return await self.repo.list_visible(identity_id, limit=limit, offset=offset)

    # PUBLIC_INTERFACE
    async def get_property(self, property_id: UUID, identity_id: UUID) -> Property:
        row = await self.repo.get_property(property_id)
        if row is None:
            raise NotFoundError("Property not found")
        await self.ownership.require(identity_id, owner_of(row), "Property")
        return row

    async def _target_owner(
        self,
        identity_id: UUID,
        *,
        organization_id: Optional[UUID],
        user_id: Optional[UUID] = None,
    ) -> Optional[Owner]:
        if organization_id is not None and user_id is not None:
            raise ValidationError("Set either organization_id or user_id, not both")
        if organization_id is not None:
            owner = OrganizationOwner(organization_id)
            await self.ownership.require(identity_id, owner, "Organization")
            return owner
        if user_id is not None:
            if user_id != identity_id:
                raise ValidationError("Ownership can only be transferred to yourself")
            return DirectOwner(user_id)
        return None

    # PUBLIC_INTERFACE
    async def create_property(self, payload: PropertyCreate, identity_id: UUID) -> Property:
        """
        Create a property owned by the caller, or by payload.organization_id when
        the caller is a member of that organization.
        """
        owner = await self._target_owner(identity_id, organization_id=payload.organization_id)
        row = await self.repo.create_property(payload, owner or DirectOwner(identity_id))
        logger.info("Property %s created", row.id)
        return row

    # PUBLIC_INTERFACE
    async def update_property(self, property_id: UUID, payload: PropertyUpdate, identity_id: UUID) -> Property:
        row = await self.get_property(property_id, identity_id)
        owner = await self._target_owner(
            identity_id, organization_id=payload.organization_id, user_id=payload.user_id
        )
        return await self.repo.update_property(row, payload, owner)

    # PUBLIC_INTERFACE
    async def delete_property(self, property_id: UUID, identity_id: UUID) -> None:
        row = await self.get_property(property_id, identity_id)
        await self.repo.delete_property(row)
