from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from quittance.core.errors import NotFoundError
from quittance.db.models import Organization
from quittance.repositories.identity import UserRepository
from quittance.repositories.organization import OrganizationRepository
from quittance.schemas.organization import (
    MemberCreate,
    MemberRead,
    OrganizationCreate,
    OrganizationUpdate,
)
from quittance.services.base import BaseService
from quittance.services.ownership import OrganizationOwner

logger = logging.getLogger(__name__)


class OrganizationService(BaseService):
    """
    Organization lifecycle and membership management.

    Every operation on an existing organization is restricted to its members;
    non-members get the same "not found" as for a missing organization.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = OrganizationRepository(session)
        self.users = UserRepository(session)

    # PUBLIC_INTERFACE
    async def create_organization(self, payload: OrganizationCreate, founder_id: UUID) -> Organization:
        org = await self.repo.create_with_owner(payload, founder_id)
        logger.info("Organization %s created by %s", org.id, founder_id)
        return org

    # PUBLIC_INTERFACE
    async def list_organizations(self, identity_id: UUID) -> List[Organization]:
        return await self.repo.list_organizations_for_user(identity_id)

    # PUBLIC_INTERFACE
    async def get_organization(self, org_id: UUID, identity_id: UUID) -> Organization:
        """Load an organization the identity is a member of."""
        org = await self.repo.get_organization(org_id)
        if org is None:
            raise NotFoundError("Organization not found")
        await self.ownership.require(identity_id, OrganizationOwner(org.id), "Organization")
        return org

    # PUBLIC_INTERFACE
    async def update_organization(
        self, org_id: UUID, payload: OrganizationUpdate, identity_id: UUID
    ) -> Organization:
        org = await self.get_organization(org_id, identity_id)
        return await self.repo.update_organization(org, payload)

    # PUBLIC_INTERFACE
    async def delete_organization(self, org_id: UUID, identity_id: UUID) -> None:
        """Delete the organization; memberships and owned properties go with it."""
        org = await self.get_organization(org_id, identity_id)
        await self.repo.delete_organization(org)
        logger.info("Organization %s deleted by %s", org_id, identity_id)

    # PUBLIC_INTERFACE
    async def add_member(self, org_id: UUID, payload: MemberCreate, identity_id: UUID) -> MemberRead:
        await self.get_organization(org_id, identity_id)
        user = await self.users.get_user_by_id(payload.user_id)
        if user is None:
            raise NotFoundError("User not found")
        member = await self.repo.add_member(
            org_id, user.id, role=payload.role, share_percentage=payload.share_percentage
        )
        return _member_view(member, user)

    # PUBLIC_INTERFACE
    async def remove_member(self, org_id: UUID, member_id: UUID, identity_id: UUID) -> None:
        await self.get_organization(org_id, identity_id)
        await self.repo.remove_member(org_id, member_id)

    # PUBLIC_INTERFACE
    async def list_members(self, org_id: UUID, identity_id: UUID) -> List[MemberRead]:
        await self.get_organization(org_id, identity_id)
        rows = await self.repo.list_members(org_id)
        return [_member_view(member, user) for member, user in rows]


def _member_view(member, user) -> MemberRead:
    return MemberRead(
        id=member.id,
        organization_id=member.organization_id,
        user_id=member.user_id,
        role=member.role,
        share_percentage=member.share_percentage,
        joined_at=member.joined_at,
        user_name=user.name,
        user_email=user.email,
    )
