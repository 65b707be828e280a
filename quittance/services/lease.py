from __future__ import annotations

import calendar
import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from quittance.core.errors import NotFoundError, ValidationError
from quittance.db.models import Lease
from quittance.repositories.lease import LeaseRepository
from quittance.schemas.lease import LeaseCreate
from quittance.services.base import BaseService
from quittance.services.property import PropertyService
from quittance.services.tenant import TenantService

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
def add_months(start: date, months: int) -> date:
    """
    Shift a date by whole months, clamping to the last day of a shorter month.

    Raises:
        ValidationError: the resulting date falls outside the supported calendar.
    """
    index = start.month - 1 + months
    year = start.year + index // 12
    month = index % 12 + 1
    try:
        day = min(start.day, calendar.monthrange(year, month)[1])
        return date(year, month, day)
    except (ValueError, OverflowError):
        raise ValidationError("duration_months out of range") from None


class LeaseService(BaseService):
    """Leases; access is inherited from the leased property."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = LeaseRepository(session)
        self.properties = PropertyService(session)
        self.tenants = TenantService(session)

    # PUBLIC_INTERFACE
    async def list_leases(
        self,
        identity_id: UUID,
        *,
        property_id: Optional[UUID] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Lease]:
        return await self.repo.list_visible(identity_id, property_id=property_id, limit=limit, offset=offset)

    # PUBLIC_INTERFACE
    async def get_lease(self, lease_id: UUID, identity_id: UUID) -> Lease:
        row = await self.repo.get_lease(lease_id)
        if row is None:
            raise NotFoundError("Lease not found")
        try:
            await self.properties.get_property(row.property_id, identity_id)
        except NotFoundError:
            raise NotFoundError("Lease not found") from None
        return row

    # PUBLIC_INTERFACE
    async def create_lease(self, payload: LeaseCreate, identity_id: UUID) -> Lease:
        """
        Create a lease between an accessible property and an accessible tenant.

        end_date is start_date shifted by duration_months.
        """
        for field in ("monthly_rent", "charges", "deposit"):
            if getattr(payload, field) < 0:
                raise ValidationError(f"{field} must not be negative")
        await self.properties.get_property(payload.property_id, identity_id)
        await self.tenants.get_tenant(payload.tenant_id, identity_id)
        row = await self.repo.create_lease(
            payload, end_date=add_months(payload.start_date, payload.duration_months)
        )
        logger.info("Lease %s created for property %s", row.id, row.property_id)
        return row

    # PUBLIC_INTERFACE
    async def delete_lease(self, lease_id: UUID, identity_id: UUID) -> None:
        row = await self.get_lease(lease_id, identity_id)
        await self.repo.delete_lease(row)
