from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select

from quittance.db.models import Property
from quittance.schemas.property import PropertyCreate, PropertyUpdate
from quittance.services.ownership import Owner, assign_owner, visible_to
from .base import BaseRepository


class PropertyRepository(BaseRepository):
    """Repository for properties owned by a user or an organization."""

    async def get_property(self, property_id: UUID) -> Optional[Property]:
        stmt = select(Property).where(Property.id == property_id)
        return await self.scalar_one_or_none(stmt)

    async def list_visible(self, identity_id: UUID, *, limit: int = 100, offset: int = 0) -> List[Property]:
        stmt = (
            select(Property)
            .where(visible_to(Property, identity_id))
            .order_by(Property.created_at.desc(), Property.id)
            .offset(offset)
            .limit(limit)
        )
        res = await self.scalars(stmt)
        return list(res)

    async def create_property(self, payload: PropertyCreate, owner: Owner) -> Property:
        row = Property(**payload.model_dump(exclude={"organization_id"}))
        assign_owner(row, owner)
        return await self.save(row)

    async def update_property(
        self, row: Property, payload: PropertyUpdate, owner: Optional[Owner] = None
    ) -> Property:
        for field, value in payload.model_dump(exclude_unset=True, exclude={"organization_id", "user_id"}).items():
            if value is not None:
                setattr(row, field, value)
        if owner is not None:
            assign_owner(row, owner)
        return await self.save(row)

    async def delete_property(self, row: Property) -> None:
        await self.remove(row)
