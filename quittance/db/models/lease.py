from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, ForeignKey, Integer, Numeric, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from quittance.db.base import Base, UUIDPkMixin, TimestampMixin


class Lease(UUIDPkMixin, TimestampMixin, Base):
    """Rental agreement between a property and a tenant."""
    __tablename__ = "leases"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    duration_months: Mapped[int] = mapped_column(Integer, nullable=False)
    monthly_rent: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False)
    charges: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    deposit: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    rent_revision: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    inventory_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="active")  # active/terminated
