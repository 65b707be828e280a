from __future__ import annotations

from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, select

from quittance.core.errors import NotFoundError
from quittance.db.models import OWNER_ROLE, Organization, OrganizationMember, User
from quittance.schemas.organization import OrganizationCreate, OrganizationUpdate
from quittance.services.ownership import member_organization_ids
from .base import BaseRepository


class OrganizationRepository(BaseRepository):
    """
    Repository for organizations and their membership graph.

    Memberships are what the ownership resolver consults, so every write here
    changes who can see organization-owned properties.
    """

    async def get_organization(self, org_id: UUID) -> Optional[Organization]:
        stmt = select(Organization).where(Organization.id == org_id)
        return await self.scalar_one_or_none(stmt)

    async def list_organizations_for_user(self, user_id: UUID) -> List[Organization]:
        stmt = (
            select(Organization)
            .where(Organization.id.in_(member_organization_ids(user_id)))
            .order_by(Organization.name)
        )
        res = await self.scalars(stmt)
        return list(res)

    async def _stage_membership(
        self,
        org_id: UUID,
        user_id: UUID,
        *,
        role: str,
        share_percentage: Optional[float],
    ) -> OrganizationMember:
        member = OrganizationMember(
            organization_id=org_id,
            user_id=user_id,
            role=role,
            share_percentage=share_percentage,
        )
        await self.add(member)
        await self.flush()
        return member

    async def create_with_owner(self, payload: OrganizationCreate, founder_id: UUID) -> Organization:
        """
        Insert an organization and its founding owner membership in one transaction.

        Either both rows are committed or neither is; no reader ever observes an
        organization without its owner.
        """
        org = Organization(**payload.model_dump())
        try:
            await self.add(org)
            await self.flush()
            await self._stage_membership(org.id, founder_id, role=OWNER_ROLE, share_percentage=None)
            await self.commit()
        except Exception:
            await self.rollback()
            raise
        return org

    async def update_organization(self, org: Organization, payload: OrganizationUpdate) -> Organization:
        # Unset fields keep their current value.
        for field, value in payload.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(org, field, value)
        return await self.save(org)

    async def delete_organization(self, org: Organization) -> None:
        await self.remove(org)

    async def add_member(
        self,
        org_id: UUID,
        user_id: UUID,
        *,
        role: str,
        share_percentage: Optional[float] = None,
    ) -> OrganizationMember:
        """Insert a membership. Duplicate (organization, user) pairs are accepted as-is."""
        try:
            member = await self._stage_membership(
                org_id, user_id, role=role, share_percentage=share_percentage
            )
            await self.commit()
        except Exception:
            await self.rollback()
            raise
        return member

    async def remove_member(self, org_id: UUID, member_id: UUID) -> None:
        """Delete one membership row scoped to the organization; NotFoundError if no row matched."""
        stmt = delete(OrganizationMember).where(
            OrganizationMember.organization_id == org_id,
            OrganizationMember.id == member_id,
        )
        result = await self.execute(stmt)
        if result.rowcount == 0:
            raise NotFoundError("Organization member not found")
        await self.commit()

    async def list_members(self, org_id: UUID) -> List[Tuple[OrganizationMember, User]]:
        """Members joined with their identity, largest share first and null shares last."""
        stmt = (
            select(OrganizationMember, User)
            .join(User, OrganizationMember.user_id == User.id)
            .where(OrganizationMember.organization_id == org_id)
            .order_by(
                OrganizationMember.share_percentage.desc().nullslast(),
                OrganizationMember.joined_at.asc(),
            )
        )
        result = await self.execute(stmt)
        return [(member, user) for member, user in result.all()]
