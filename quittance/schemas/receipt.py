from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ReceiptCreate(BaseModel):
    """Create a rent receipt for one lease and one month."""
    lease_id: UUID = Field(...)
    period_month: int = Field(..., description="Month 1-12")
    period_year: int = Field(..., description="Year 1900-2100")
    base_rent: float = Field(...)
    charges: float = Field(0)
    payment_date: date = Field(...)


class ReceiptUpdate(BaseModel):
    """Receipt status/payment update."""
    status: Optional[str] = Field(None, description="generated, sent or paid")
    payment_date: Optional[date] = Field(None)


class ReceiptRead(BaseModel):
    """Receipt read model."""
    id: UUID = Field(...)
    lease_id: UUID = Field(...)
    period_month: int = Field(...)
    period_year: int = Field(...)
    base_rent: float = Field(...)
    charges: float = Field(...)
    total_amount: float = Field(..., description="base_rent + charges")
    payment_date: date = Field(...)
    status: str = Field(...)
    created_at: datetime = Field(...)
    updated_at: datetime = Field(...)

    class Config:
        from_attributes = True
