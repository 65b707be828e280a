"""
tests/test_ownership.py -- Tests for quittance.services.ownership.

Covers:
  - owner_of / assign_owner keep exactly one owner column set
  - authorize: direct ownership and organization-mediated access
  - require: denial is reported as "not found"
  - visible_to: one row per property even with duplicate memberships
"""

from __future__ import annotations

from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from quittance.core.errors import NotFoundError
from quittance.db.models import Organization, OrganizationMember, Property
from quittance.services.ownership import (
    DirectOwner,
    OrganizationOwner,
    OwnershipResolver,
    assign_owner,
    owner_of,
    visible_to,
)

from .conftest import create_user


def _property(**owner) -> Property:
    return Property(address="1 rue de la Paix", property_type="apartment", **owner)


async def _organization(session, *members, shares=None) -> Organization:
    org = Organization(name="SCI Test", legal_form="SCI", address="Paris")
    session.add(org)
    await session.flush()
    for member in members:
        session.add(OrganizationMember(organization_id=org.id, user_id=member.id, role="associate"))
    await session.commit()
    return org


class TestOwnerVariant:
    def test_owner_of_direct(self) -> None:
        user_id = uuid4()
        assert owner_of(_property(user_id=user_id)) == DirectOwner(user_id)

    def test_owner_of_organization(self) -> None:
        org_id = uuid4()
        assert owner_of(_property(organization_id=org_id)) == OrganizationOwner(org_id)

    def test_owner_of_rejects_both_or_neither(self) -> None:
        with pytest.raises(ValueError):
            owner_of(_property(user_id=uuid4(), organization_id=uuid4()))
        with pytest.raises(ValueError):
            owner_of(_property())

    def test_assign_owner_clears_other_column(self) -> None:
        row = _property(user_id=uuid4())
        org_id = uuid4()
        assign_owner(row, OrganizationOwner(org_id))
        assert row.user_id is None and row.organization_id == org_id

        user_id = uuid4()
        assign_owner(row, DirectOwner(user_id))
        assert row.organization_id is None and row.user_id == user_id


class TestAuthorize:
    def test_direct_owner(self, run_db) -> None:
        async def scenario(maker):
            async with maker() as session:
                resolver = OwnershipResolver(session)
                me, other = uuid4(), uuid4()
                return (
                    await resolver.authorize(me, DirectOwner(me)),
                    await resolver.authorize(other, DirectOwner(me)),
                )

        assert run_db(scenario) == (True, False)

    def test_organization_member_and_stranger(self, run_db) -> None:
        async def scenario(maker):
            async with maker() as session:
                member = await create_user(session, "member")
                stranger = await create_user(session, "stranger")
                org = await _organization(session, member)
                resolver = OwnershipResolver(session)
                owner = OrganizationOwner(org.id)
                return await resolver.authorize(member.id, owner), await resolver.authorize(stranger.id, owner)

        assert run_db(scenario) == (True, False)

    def test_any_role_grants_access(self, run_db) -> None:
        async def scenario(maker):
            async with maker() as session:
                user = await create_user(session)
                org = Organization(name="SCI Roles", legal_form="SCI", address="Lyon")
                session.add(org)
                await session.flush()
                session.add(
                    OrganizationMember(organization_id=org.id, user_id=user.id, role="observer", share_percentage=0.0)
                )
                await session.commit()
                return await OwnershipResolver(session).authorize(user.id, OrganizationOwner(org.id))

        assert run_db(scenario) is True

    def test_require_denial_is_not_found(self, run_db) -> None:
        async def scenario(maker):
            async with maker() as session:
                with pytest.raises(NotFoundError) as exc:
                    await OwnershipResolver(session).require(uuid4(), DirectOwner(uuid4()), "Property")
                return exc.value

        err = run_db(scenario)
        assert err.status_code == 404
        assert err.message == "Property not found"


class TestVisibleTo:
    def test_union_of_direct_and_organization_properties(self, run_db) -> None:
        async def scenario(maker):
            async with maker() as session:
                me = await create_user(session, "me")
                other = await create_user(session, "other")
                mine_org = await _organization(session, me)
                foreign_org = await _organization(session, other)
                session.add_all(
                    [
                        _property(user_id=me.id, description="direct"),
                        _property(organization_id=mine_org.id, description="via-org"),
                        _property(user_id=other.id, description="foreign-direct"),
                        _property(organization_id=foreign_org.id, description="foreign-org"),
                    ]
                )
                await session.commit()
                rows = (await session.scalars(select(Property).where(visible_to(Property, me.id)))).all()
                return sorted(p.description for p in rows)

        assert run_db(scenario) == ["direct", "via-org"]

    def test_duplicate_memberships_do_not_duplicate_rows(self, run_db) -> None:
        async def scenario(maker):
            async with maker() as session:
                me = await create_user(session)
                org = await _organization(session, me, me)
                session.add(OrganizationMember(organization_id=org.id, user_id=me.id, role="manager"))
                session.add(_property(organization_id=org.id))
                await session.commit()
                rows = (await session.scalars(select(Property).where(visible_to(Property, me.id)))).all()
                return len(rows)

        assert run_db(scenario) == 1

    def test_schema_rejects_two_owners(self, run_db) -> None:
        """The CHECK constraint backs the variant at the storage level."""

        async def scenario(maker):
            async with maker() as session:
                me = await create_user(session)
                org = await _organization(session, me)
                session.add(_property(user_id=me.id, organization_id=org.id))
                with pytest.raises(IntegrityError):
                    await session.commit()
                return True

        assert run_db(scenario) is True
