from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from quittance.core.deps import get_current_user_id, get_session
from quittance.schemas.common import MessageResponse
from quittance.schemas.lease import LeaseCreate, LeaseRead
from quittance.services.lease import LeaseService

router = APIRouter(prefix="/leases", tags=["Leases"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[LeaseRead],
    summary="List leases",
    description="Leases on properties visible to the caller, optionally for one property.",
)
async def list_leases(
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
    property_id: UUID | None = Query(None, description="Filter by property id"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[LeaseRead]:
    rows = await LeaseService(session).list_leases(
        user_id, property_id=property_id, limit=limit, offset=offset
    )
    return [LeaseRead.model_validate(x) for x in rows]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=LeaseRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create lease",
    description="Create a lease; end_date is start_date plus duration_months.",
)
async def create_lease(
    payload: LeaseCreate,
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> LeaseRead:
    return LeaseRead.model_validate(await LeaseService(session).create_lease(payload, user_id))


# PUBLIC_INTERFACE
@router.get("/{lease_id}", response_model=LeaseRead, summary="Get lease")
async def get_lease(
    lease_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> LeaseRead:
    return LeaseRead.model_validate(await LeaseService(session).get_lease(lease_id, user_id))


# PUBLIC_INTERFACE
@router.delete("/{lease_id}", response_model=MessageResponse, summary="Delete lease")
async def delete_lease(
    lease_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> MessageResponse:
    await LeaseService(session).delete_lease(lease_id, user_id)
    return MessageResponse(message="Lease deleted")
