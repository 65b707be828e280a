from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import exists, select

from quittance.db.models import Lease, Property, Receipt
from quittance.schemas.receipt import ReceiptCreate, ReceiptUpdate
from quittance.services.ownership import visible_to
from .base import BaseRepository


class ReceiptRepository(BaseRepository):
    """Repository for rent receipts; visibility follows lease -> property."""

    async def get_receipt(self, receipt_id: UUID) -> Optional[Receipt]:
        stmt = select(Receipt).where(Receipt.id == receipt_id)
        return await self.scalar_one_or_none(stmt)

    async def list_visible(
        self,
        identity_id: UUID,
        *,
        lease_id: Optional[UUID] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Receipt]:
        stmt = (
            select(Receipt)
            .join(Lease, Receipt.lease_id == Lease.id)
            .join(Property, Lease.property_id == Property.id)
            .where(visible_to(Property, identity_id))
        )
        if lease_id:
            stmt = stmt.where(Receipt.lease_id == lease_id)
        stmt = (
            stmt.order_by(Receipt.period_year.desc(), Receipt.period_month.desc(), Receipt.id)
            .offset(offset)
            .limit(limit)
        )
        res = await self.scalars(stmt)
        return list(res)

    async def period_exists(self, lease_id: UUID, month: int, year: int) -> bool:
        stmt = select(
            exists().where(
                Receipt.lease_id == lease_id,
                Receipt.period_month == month,
                Receipt.period_year == year,
            )
        )
        result = await self.execute(stmt)
        return bool(result.scalar())

    async def create_receipt(self, payload: ReceiptCreate, *, total_amount: float) -> Receipt:
        return await self.save(Receipt(total_amount=total_amount, status="generated", **payload.model_dump()))

    async def update_receipt(self, row: Receipt, payload: ReceiptUpdate) -> Receipt:
        for field, value in payload.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(row, field, value)
        return await self.save(row)
