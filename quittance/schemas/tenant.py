from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class TenantCreate(BaseModel):
    """Create tenant (resident) payload."""
    name: str = Field(..., min_length=1)
    email: Optional[str] = Field(None)
    phone: Optional[str] = Field(None)
    address: Optional[str] = Field(None)
    birth_date: Optional[date] = Field(None)
    birth_place: Optional[str] = Field(None)
    notes: Optional[str] = Field(None)


class TenantUpdate(BaseModel):
    """Partial tenant update."""
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = Field(None)
    phone: Optional[str] = Field(None)
    address: Optional[str] = Field(None)
    birth_date: Optional[date] = Field(None)
    birth_place: Optional[str] = Field(None)
    notes: Optional[str] = Field(None)


class TenantRead(BaseModel):
    """Tenant read model."""
    id: UUID = Field(...)
    user_id: UUID = Field(..., description="Owning user")
    name: str = Field(...)
    email: Optional[str] = Field(None)
    phone: Optional[str] = Field(None)
    address: Optional[str] = Field(None)
    birth_date: Optional[date] = Field(None)
    birth_place: Optional[str] = Field(None)
    notes: Optional[str] = Field(None)
    created_at: datetime = Field(...)
    updated_at: datetime = Field(...)

    class Config:
        from_attributes = True
