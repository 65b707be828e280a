from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from quittance.core.deps import get_current_user_id, get_session
from quittance.schemas.common import MessageResponse
from quittance.schemas.property import PropertyCreate, PropertyRead, PropertyUpdate
from quittance.services.property import PropertyService

router = APIRouter(prefix="/properties", tags=["Properties"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[PropertyRead],
    summary="List properties",
    description="Properties owned by the caller or by an organization the caller belongs to.",
)
async def list_properties(
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[PropertyRead]:
    rows = await PropertyService(session).list_properties(user_id, limit=limit, offset=offset)
    return [PropertyRead.model_validate(x) for x in rows]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=PropertyRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create property",
    description="Create a property owned by the caller, or by organization_id when the caller is a member.",
)
async def create_property(
    payload: PropertyCreate,
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> PropertyRead:
    row = await PropertyService(session).create_property(payload, user_id)
    return PropertyRead.model_validate(row)


# PUBLIC_INTERFACE
@router.get(
    "/{property_id}",
    response_model=PropertyRead,
    summary="Get property",
)
async def get_property(
    property_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> PropertyRead:
    return PropertyRead.model_validate(await PropertyService(session).get_property(property_id, user_id))


# PUBLIC_INTERFACE
@router.put(
    "/{property_id}",
    response_model=PropertyRead,
    summary="Update property",
    description="Partial update. organization_id or user_id (the caller) transfers ownership.",
)
async def update_property(
    payload: PropertyUpdate,
    property_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> PropertyRead:
    row = await PropertyService(session).update_property(property_id, payload, user_id)
    return PropertyRead.model_validate(row)


# PUBLIC_INTERFACE
@router.delete(
    "/{property_id}",
    response_model=MessageResponse,
    summary="Delete property",
    description="Delete the property together with its leases and receipts.",
)
async def delete_property(
    property_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> MessageResponse:
    await PropertyService(session).delete_property(property_id, user_id)
    return MessageResponse(message="Property deleted")
