from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from quittance.core.deps import get_current_user_id, get_session
from quittance.schemas.common import MessageResponse
from quittance.schemas.tenant import TenantCreate, TenantRead, TenantUpdate
from quittance.services.tenant import TenantService

router = APIRouter(prefix="/tenants", tags=["Tenants"])


# PUBLIC_INTERFACE
@router.get("", response_model=List[TenantRead], summary="List tenants")
async def list_tenants(
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[TenantRead]:
    rows = await TenantService(session).list_tenants(user_id, limit=limit, offset=offset)
    return [TenantRead.model_validate(x) for x in rows]


# PUBLIC_INTERFACE
@router.post("", response_model=TenantRead, status_code=status.HTTP_201_CREATED, summary="Create tenant")
async def create_tenant(
    payload: TenantCreate,
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> TenantRead:
    return TenantRead.model_validate(await TenantService(session).create_tenant(payload, user_id))


# PUBLIC_INTERFACE
@router.get("/{tenant_id}", response_model=TenantRead, summary="Get tenant")
async def get_tenant(
    tenant_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> TenantRead:
    return TenantRead.model_validate(await TenantService(session).get_tenant(tenant_id, user_id))


# PUBLIC_INTERFACE
@router.put("/{tenant_id}", response_model=TenantRead, summary="Update tenant")
async def update_tenant(
    payload: TenantUpdate,
    tenant_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> TenantRead:
    row = await TenantService(session).update_tenant(tenant_id, payload, user_id)
    return TenantRead.model_validate(row)


# PUBLIC_INTERFACE
@router.delete("/{tenant_id}", response_model=MessageResponse, summary="Delete tenant")
async def delete_tenant(
    tenant_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> MessageResponse:
    await TenantService(session).delete_tenant(tenant_id, user_id)
    return MessageResponse(message="Tenant deleted")
