from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from quittance.core.errors import ConflictError, NotFoundError, ValidationError
from quittance.db.models import Receipt
from quittance.repositories.receipt import ReceiptRepository
from quittance.schemas.receipt import ReceiptCreate, ReceiptUpdate
from quittance.services.base import BaseService
from quittance.services.lease import LeaseService

logger = logging.getLogger(__name__)

RECEIPT_STATUSES = ("generated", "sent", "paid")
DUPLICATE_PERIOD_MESSAGE = "A receipt already exists for this lease and period"


class ReceiptService(BaseService):
    """Monthly rent receipts; access is inherited from lease -> property."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = ReceiptRepository(session)
        self.leases = LeaseService(session)

    # PUBLIC_INTERFACE
    async def list_receipts(
        self,
        identity_id: UUID,
        *,
        lease_id: Optional[UUID] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Receipt]:
        return await self.repo.list_visible(identity_id, lease_id=lease_id, limit=limit, offset=offset)

    # PUBLIC_INTERFACE
    async def get_receipt(self, receipt_id: UUID, identity_id: UUID) -> Receipt:
        row = await self.repo.get_receipt(receipt_id)
        if row is None:
            raise NotFoundError("Receipt not found")
        try:
            await self.leases.get_lease(row.lease_id, identity_id)
        except NotFoundError:
            raise NotFoundError("Receipt not found") from None
        return row

    # PUBLIC_INTERFACE
    async def create_receipt(self, payload: ReceiptCreate, identity_id: UUID) -> Receipt:
        """
        Create the receipt for one lease and month; total_amount = base_rent + charges.

        Raises:
            ValidationError: month outside 1-12, year outside 1900-2100, negative amount.
            ConflictError: a receipt already exists for (lease, month, year).
        """
        if not 1 <= payload.period_month <= 12:
            raise ValidationError("period_month must be between 1 and 12")
        if not 1900 <= payload.period_year <= 2100:
            raise ValidationError("period_year must be between 1900 and 2100")
        if payload.base_rent < 0 or payload.charges < 0:
            raise ValidationError("Amounts must not be negative")

        await self.leases.get_lease(payload.lease_id, identity_id)
        if await self.repo.period_exists(payload.lease_id, payload.period_month, payload.period_year):
            raise ConflictError(DUPLICATE_PERIOD_MESSAGE)

        total = round(payload.base_rent + payload.charges, 2)
        try:
            row = await self.repo.create_receipt(payload, total_amount=total)
        except IntegrityError:
            raise ConflictError(DUPLICATE_PERIOD_MESSAGE) from None
        logger.info(
            "Receipt %s created for lease %s (%02d/%d)",
            row.id,
            row.lease_id,
            row.period_month,
            row.period_year,
        )
        return row

    # PUBLIC_INTERFACE
    async def update_receipt(self, receipt_id: UUID, payload: ReceiptUpdate, identity_id: UUID) -> Receipt:
        if payload.status is not None and payload.status not in RECEIPT_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(RECEIPT_STATUSES)}")
        row = await self.get_receipt(receipt_id, identity_id)
        return await self.repo.update_receipt(row, payload)
