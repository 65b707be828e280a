from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class PropertyCreate(BaseModel):
    """
    Create property payload.

    Without organization_id the caller owns the property directly; with it, the
    organization does (the caller must be a member).
    """
    address: str = Field(..., min_length=1)
    property_type: str = Field(..., description="apartment, house, studio, ...")
    furnished: bool = Field(False)
    surface_area: Optional[float] = Field(None, ge=0, description="Surface in square metres")
    rooms: Optional[int] = Field(None, ge=0)
    max_occupants: int = Field(1, ge=1)
    description: Optional[str] = Field(None)
    organization_id: Optional[UUID] = Field(None, description="Owning organization, if any")


class PropertyUpdate(BaseModel):
    """Partial update. Set at most one of organization_id / user_id to transfer ownership."""
    address: Optional[str] = Field(None, min_length=1)
    property_type: Optional[str] = Field(None)
    furnished: Optional[bool] = Field(None)
    surface_area: Optional[float] = Field(None, ge=0)
    rooms: Optional[int] = Field(None, ge=0)
    max_occupants: Optional[int] = Field(None, ge=1)
    description: Optional[str] = Field(None)
    organization_id: Optional[UUID] = Field(None, description="Move ownership to this organization")
    user_id: Optional[UUID] = Field(None, description="Move ownership to the caller directly")


class PropertyRead(BaseModel):
    """Property read model; exactly one of user_id / organization_id is set."""
    id: UUID = Field(..., description="Property ID")
    user_id: Optional[UUID] = Field(None)
    organization_id: Optional[UUID] = Field(None)
    address: str = Field(...)
    property_type: str = Field(...)
    furnished: bool = Field(...)
    surface_area: Optional[float] = Field(None)
    rooms: Optional[int] = Field(None)
    max_occupants: int = Field(...)
    description: Optional[str] = Field(None)
    created_at: datetime = Field(..., description="Created timestamp")
    updated_at: datetime = Field(..., description="Updated timestamp")

    class Config:
        from_attributes = True
