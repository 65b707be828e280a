from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, ForeignKey, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from quittance.db.base import Base, UUIDPkMixin, TimestampMixin, utcnow

OWNER_ROLE = "owner"


class Organization(UUIDPkMixin, TimestampMixin, Base):
    """Legal entity (e.g. an SCI) that owns properties jointly through its members."""
    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    legal_form: Mapped[str] = mapped_column(Text, nullable=False)
    siret: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class OrganizationMember(UUIDPkMixin, Base):
    """
    Membership of a user in an organization.

    (organization_id, user_id) is deliberately not unique: the same user may hold
    several memberships, e.g. with different roles or share blocks.
    """
    __tablename__ = "organization_members"

    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[str] = mapped_column(Text, nullable=False)
    share_percentage: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False
    )
