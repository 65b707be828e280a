from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select

from quittance.db.models import Tenant
from quittance.schemas.tenant import TenantCreate, TenantUpdate
from .base import BaseRepository


class TenantRepository(BaseRepository):
    """Repository for tenants (residents); always owned directly by one user."""

    async def get_tenant(self, tenant_id: UUID) -> Optional[Tenant]:
        stmt = select(Tenant).where(Tenant.id == tenant_id)
        return await self.scalar_one_or_none(stmt)

    async def list_for_user(self, user_id: UUID, *, limit: int = 100, offset: int = 0) -> List[Tenant]:
        stmt = (
            select(Tenant)
            .where(Tenant.user_id == user_id)
            .order_by(Tenant.name, Tenant.id)
            .offset(offset)
            .limit(limit)
        )
        res = await self.scalars(stmt)
        return list(res)

    async def create_tenant(self, payload: TenantCreate, user_id: UUID) -> Tenant:
        return await self.save(Tenant(user_id=user_id, **payload.model_dump()))

    async def update_tenant(self, row: Tenant, payload: TenantUpdate) -> Tenant:
        for field, value in payload.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(row, field, value)
        return await self.save(row)

    async def delete_tenant(self, row: Tenant) -> None:
        await self.remove(row)
