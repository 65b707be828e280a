from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from quittance.core.deps import get_current_user_id, get_session
from quittance.schemas.receipt import ReceiptCreate, ReceiptRead, ReceiptUpdate
from quittance.services.receipt import ReceiptService

router = APIRouter(prefix="/receipts", tags=["Receipts"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[ReceiptRead],
    summary="List receipts",
    description="Receipts for leases visible to the caller, most recent period first.",
)
async def list_receipts(
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
    lease_id: UUID | None = Query(None, description="Filter by lease id"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[ReceiptRead]:
    rows = await ReceiptService(session).list_receipts(user_id, lease_id=lease_id, limit=limit, offset=offset)
    return [ReceiptRead.model_validate(x) for x in rows]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=ReceiptRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create receipt",
    description="Create the receipt of one month; 409 if that period already has one.",
)
async def create_receipt(
    payload: ReceiptCreate,
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> ReceiptRead:
    return ReceiptRead.model_validate(await ReceiptService(session).create_receipt(payload, user_id))


# PUBLIC_INTERFACE
@router.get("/{receipt_id}", response_model=ReceiptRead, summary="Get receipt")
async def get_receipt(
    receipt_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> ReceiptRead:
    return ReceiptRead.model_validate(await ReceiptService(session).get_receipt(receipt_id, user_id))


# PUBLIC_INTERFACE
@router.patch(
    "/{receipt_id}",
    response_model=ReceiptRead,
    summary="Update receipt",
    description="Change the status (generated, sent, paid) or the payment date.",
)
async def update_receipt(
    payload: ReceiptUpdate,
    receipt_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
    user_id: UUID = Depends(get_current_user_id),
) -> ReceiptRead:
    row = await ReceiptService(session).update_receipt(receipt_id, payload, user_id)
    return ReceiptRead.model_validate(row)
