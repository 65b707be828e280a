from __future__ import annotations

from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from quittance.core.errors import NotFoundError
from quittance.db.models import Tenant
from quittance.repositories.tenant import TenantRepository
from quittance.schemas.tenant import TenantCreate, TenantUpdate
from quittance.services.base import BaseService
from quittance.services.ownership import DirectOwner


class TenantService(BaseService):
    """Tenants belong to the user who recorded them."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = TenantRepository(session)

    async def list_tenants(self, identity_id: UUID, *, limit: int = 100, offset: int = 0) -> List[Tenant]:
        return await self.repo.list_for_user(identity_id, limit=limit, offset=offset)

    async def get_tenant(self, tenant_id: UUID, identity_id: UUID) -> Tenant:
        row = await self.repo.get_tenant(tenant_id)
        if row is None:
            raise NotFoundError("Tenant not found")
        await self.ownership.require(identity_id, DirectOwner(row.user_id), "Tenant")
        return row

    async def create_tenant(self, payload: TenantCreate, identity_id: UUID) -> Tenant:
        return await self.repo.create_tenant(payload, identity_id)

    async def update_tenant(self, tenant_id: UUID, payload: TenantUpdate, identity_id: UUID) -> Tenant:
        row = await self.get_tenant(tenant_id, identity_id)
        return await self.repo.update_tenant(row, payload)

    async def delete_tenant(self, tenant_id: UUID, identity_id: UUID) -> None:
        row = await self.get_tenant(tenant_id, identity_id)
        await self.repo.delete_tenant(row)
