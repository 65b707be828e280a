from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, Numeric, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from quittance.db.base import Base, UUIDPkMixin, TimestampMixin


class Property(UUIDPkMixin, TimestampMixin, Base):
    """
    Rental property, owned either directly by a user or by an organization.

    Exactly one of user_id / organization_id is set; the CHECK constraint holds
    the line below quittance.services.ownership.
    """
    __tablename__ = "properties"
    __table_args__ = (
        CheckConstraint(
            "(user_id IS NULL) <> (organization_id IS NULL)",
            name="single_owner",
        ),
    )

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True
    )
    organization_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=True, index=True
    )
    address: Mapped[str] = mapped_column(Text, nullable=False)
    property_type: Mapped[str] = mapped_column(Text, nullable=False)  # apartment/house/studio/etc.
    furnished: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    surface_area: Mapped[Optional[float]] = mapped_column(Numeric(10, 2), nullable=True)
    rooms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    max_occupants: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
