from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from quittance.core.deps import get_current_user_id, get_session
from quittance.schemas.common import MessageResponse
from quittance.schemas.organization import (
    MemberCreate,
    MemberRead,
    OrganizationCreate,
    OrganizationDetail,
    OrganizationRead,
    OrganizationUpdate,
)
from quittance.services.organization import OrganizationService

router = APIRouter(prefix="/organizations", tags=["Organizations"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[OrganizationRead],
    summary="List organizations",
    description="Organizations the caller is a member of, ordered by name.",
)
async def list_organizations(
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> List[OrganizationRead]:
    orgs = await OrganizationService(session).list_organizations(user_id)
    return [OrganizationRead.model_validate(x) for x in orgs]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=OrganizationRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create organization",
    description="Create an organization; the caller is recorded as its owner member in the same transaction.",
)
async def create_organization(
    payload: OrganizationCreate,
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> OrganizationRead:
    org = await OrganizationService(session).create_organization(payload, user_id)
    return OrganizationRead.model_validate(org)


# PUBLIC_INTERFACE
@router.get(
    "/{org_id}",
    response_model=OrganizationDetail,
    summary="Get organization",
    description="Organization with its members, largest share first. Members only.",
)
async def get_organization(
    org_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> OrganizationDetail:
    service = OrganizationService(session)
    org = await service.get_organization(org_id, user_id)
    members = await service.list_members(org_id, user_id)
    return OrganizationDetail(**OrganizationRead.model_validate(org).model_dump(), members=members)


# PUBLIC_INTERFACE
@router.put(
    "/{org_id}",
    response_model=OrganizationRead,
    summary="Update organization",
    description="Partial update; omitted fields keep their value. Members only.",
)
async def update_organization(
    payload: OrganizationUpdate,
    org_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> OrganizationRead:
    org = await OrganizationService(session).update_organization(org_id, payload, user_id)
    return OrganizationRead.model_validate(org)


# PUBLIC_INTERFACE
@router.delete(
    "/{org_id}",
    response_model=MessageResponse,
    summary="Delete organization",
    description="Delete the organization with its memberships and the properties it owns. Members only.",
)
async def delete_organization(
    org_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> MessageResponse:
    await OrganizationService(session).delete_organization(org_id, user_id)
    return MessageResponse(message="Organization deleted")


# PUBLIC_INTERFACE
@router.get(
    "/{org_id}/members",
    response_model=List[MemberRead],
    summary="List members",
    description="Members ordered by share percentage, highest first, unset shares last.",
)
async def list_members(
    org_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> List[MemberRead]:
    return await OrganizationService(session).list_members(org_id, user_id)


# PUBLIC_INTERFACE
@router.post(
    "/{org_id}/members",
    response_model=MemberRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add member",
    description="Add a registered user to the organization with a role and an optional share.",
)
async def add_member(
    payload: MemberCreate,
    org_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> MemberRead:
    return await OrganizationService(session).add_member(org_id, payload, user_id)


# PUBLIC_INTERFACE
@router.delete(
    "/{org_id}/members/{member_id}",
    response_model=MessageResponse,
    summary="Remove member",
    description="Remove one membership of this organization.",
)
async def remove_member(
    org_id: UUID = Path(...),
    member_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> MessageResponse:
    await OrganizationService(session).remove_member(org_id, member_id, user_id)
    return MessageResponse(message="Member removed")
