from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, Numeric, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from quittance.db.base import Base, UUIDPkMixin, TimestampMixin


class Receipt(UUIDPkMixin, TimestampMixin, Base):
    """Rent receipt (quittance) for one lease and one calendar month."""
    __tablename__ = "receipts"
    __table_args__ = (
        UniqueConstraint("lease_id", "period_month", "period_year", name="uq_receipts_lease_period"),
    )

    lease_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("leases.id", ondelete="CASCADE"), nullable=False, index=True
    )
    period_month: Mapped[int] = mapped_column(Integer, nullable=False)
    period_year: Mapped[int] = mapped_column(Integer, nullable=False)
    base_rent: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False)
    charges: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False)
    total_amount: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="generated")  # generated/sent/paid
