from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class LeaseCreate(BaseModel):
    """Create lease payload; end_date is derived from start_date and duration."""
    property_id: UUID = Field(...)
    tenant_id: UUID = Field(...)
    start_date: date = Field(...)
    duration_months: int = Field(..., ge=1, le=1200, description="Lease duration in months")
    monthly_rent: float = Field(..., description="Rent excluding charges")
    charges: float = Field(0)
    deposit: float = Field(0)
    rent_revision: bool = Field(False, description="Annual rent revision clause")
    inventory_date: Optional[date] = Field(None)


class LeaseRead(BaseModel):
    """Lease read model."""
    id: UUID = Field(...)
    property_id: UUID = Field(...)
    tenant_id: UUID = Field(...)
    start_date: date = Field(...)
    end_date: Optional[date] = Field(None)
    duration_months: int = Field(...)
    monthly_rent: float = Field(...)
    charges: float = Field(...)
    deposit: float = Field(...)
    rent_revision: bool = Field(...)
    inventory_date: Optional[date] = Field(None)
    status: str = Field(...)
    created_at: datetime = Field(...)
    updated_at: datetime = Field(...)

    class Config:
        from_attributes = True
