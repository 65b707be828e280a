"""
Ownership resolution: who may act on which resource.

A resource is owned by exactly one Owner: a user directly, or an organization.
An identity may access the resource iff it is the direct owner, or it holds at
least one membership (any role, any share) in the owning organization.

Denials surface as NotFoundError so callers cannot probe for the existence of
resources they are not entitled to.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Union
from uuid import UUID

from sqlalchemy import ColumnElement, exists, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from quittance.core.errors import NotFoundError
from quittance.db.models import OrganizationMember

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectOwner:
    user_id: UUID


@dataclass(frozen=True)
class OrganizationOwner:
    organization_id: UUID


Owner = Union[DirectOwner, OrganizationOwner]


# PUBLIC_INTERFACE
def owner_of(resource: Any) -> Owner:
    """
    Read the owner variant from a persisted resource's user_id/organization_id columns.

    Raises:
        ValueError: both or neither column is set (the schema CHECK forbids this).
    """
    user_id = getattr(resource, "user_id", None)
    organization_id = getattr(resource, "organization_id", None)
    if (user_id is None) == (organization_id is None):
        raise ValueError(f"{type(resource).__name__} {resource.id} must have exactly one owner")
    if organization_id is not None:
        return OrganizationOwner(organization_id)
    return DirectOwner(user_id)


# PUBLIC_INTERFACE
def assign_owner(resource: Any, owner: Owner) -> None:
    """Write the owner onto a resource, clearing the other ownership column."""
    if isinstance(owner, OrganizationOwner):
        resource.organization_id = owner.organization_id
        resource.user_id = None
    else:
        resource.user_id = owner.user_id
        resource.organization_id = None


def member_organization_ids(identity_id: UUID):
    """Subquery of organization ids the identity belongs to."""
    return select(OrganizationMember.organization_id).where(OrganizationMember.user_id == identity_id)


# PUBLIC_INTERFACE
def visible_to(model: Any, identity_id: UUID) -> ColumnElement[bool]:
    """
    WHERE clause selecting rows of an owned model visible to the identity.

    Union of both ownership paths in one predicate; the IN subquery means
    duplicate memberships never duplicate result rows.
    """
    return or_(
        model.user_id == identity_id,
        model.organization_id.in_(member_organization_ids(identity_id)),
    )


class OwnershipResolver:
    """Per-request authorization decisions backed by the membership table."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def is_member(self, identity_id: UUID, organization_id: UUID) -> bool:
        stmt = select(
            exists().where(
                OrganizationMember.organization_id == organization_id,
                OrganizationMember.user_id == identity_id,
            )
        )
        result = await self.session.execute(stmt)
        return bool(result.scalar())

    # PUBLIC_INTERFACE
    async def authorize(self, identity_id: UUID, owner: Owner) -> bool:
        """Return True when the identity may act on a resource owned by owner."""
        if isinstance(owner, DirectOwner):
            return owner.user_id == identity_id
        return await self.is_member(identity_id, owner.organization_id)

    # PUBLIC_INTERFACE
    async def require(self, identity_id: UUID, owner: Owner, what: str = "Resource") -> None:
        """
        Enforce authorize(); a denial raises NotFoundError("<what> not found").
        """
        if not await self.authorize(identity_id, owner):
            logger.info("Access denied to %s for identity %s", what.lower(), identity_id)
            raise NotFoundError(f"{what} not found")
