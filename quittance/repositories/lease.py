from __future__ import annotations

from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select

from quittance.db.models import Lease, Property
from quittance.schemas.lease import LeaseCreate
from quittance.services.ownership import visible_to
from .base import BaseRepository


class LeaseRepository(BaseRepository):
    """Repository for leases; visibility follows the leased property."""

    async def get_lease(self, lease_id: UUID) -> Optional[Lease]:
        stmt = select(Lease).where(Lease.id == lease_id)
        return await self.scalar_one_or_none(stmt)

    async def list_visible(
        self,
        identity_id: UUID,
        *,
        property_id: Optional[UUID] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Lease]:
        stmt = (
            select(Lease)
            .join(Property, Lease.property_id == Property.id)
            .where(visible_to(Property, identity_id))
        )
        if property_id:
            stmt = stmt.where(Lease.property_id == property_id)
        stmt = stmt.order_by(Lease.start_date.desc(), Lease.id).offset(offset).limit(limit)
        res = await self.scalars(stmt)
        return list(res)

    async def create_lease(self, payload: LeaseCreate, *, end_date: date) -> Lease:
        return await self.save(Lease(end_date=end_date, status="active", **payload.model_dump()))

    async def delete_lease(self, row: Lease) -> None:
        await self.remove(row)
