from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class OrganizationCreate(BaseModel):
    """Create organization payload; the caller becomes its owner member."""
    name: str = Field(..., min_length=1, description="Organization name, e.g. 'SCI Foo'")
    legal_form: str = Field(..., description="Legal form (SCI, SARL, ...)")
    siret: Optional[str] = Field(None, description="SIRET registration number")
    address: str = Field(..., description="Registered address")
    phone: Optional[str] = Field(None)
    email: Optional[str] = Field(None)


class OrganizationUpdate(BaseModel):
    """Partial update; omitted or null fields keep their current value."""
    name: Optional[str] = Field(None, min_length=1)
    legal_form: Optional[str] = Field(None)
    siret: Optional[str] = Field(None)
    address: Optional[str] = Field(None)
    phone: Optional[str] = Field(None)
    email: Optional[str] = Field(None)


class OrganizationRead(BaseModel):
    """Organization read model."""
    id: UUID = Field(..., description="Organization ID")
    name: str = Field(...)
    legal_form: str = Field(...)
    siret: Optional[str] = Field(None)
    address: str = Field(...)
    phone: Optional[str] = Field(None)
    email: Optional[str] = Field(None)
    created_at: datetime = Field(..., description="Created timestamp")
    updated_at: datetime = Field(..., description="Updated timestamp")

    class Config:
        from_attributes = True


class MemberCreate(BaseModel):
    """Add a member to an organization."""
    user_id: UUID = Field(..., description="Identity joining the organization")
    role: str = Field(..., min_length=1, description="Free-form role, e.g. 'owner' or 'associate'")
    share_percentage: Optional[float] = Field(None, ge=0, le=100, description="Share held, in percent")


class MemberRead(BaseModel):
    """Membership joined with a summary of the member's identity."""
    id: UUID = Field(..., description="Membership ID")
    organization_id: UUID = Field(...)
    user_id: UUID = Field(...)
    role: str = Field(...)
    share_percentage: Optional[float] = Field(None)
    joined_at: datetime = Field(...)
    user_name: str = Field(..., description="Member display name")
    user_email: str = Field(..., description="Member e-mail")


class OrganizationDetail(OrganizationRead):
    """Organization with its members, largest share first."""
    members: List[MemberRead] = Field(default_factory=list)
