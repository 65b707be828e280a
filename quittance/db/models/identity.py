from __future__ import annotations

from datetime import date
from typing import Optional

from sqlalchemy import Date, Text
from sqlalchemy.orm import Mapped, mapped_column

from quittance.db.base import Base, UUIDPkMixin, TimestampMixin


class User(UUIDPkMixin, TimestampMixin, Base):
    """Registered account. E-mail is stored lower-cased; the digest never leaves the core."""
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False, default="")
    phone: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    birth_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    birth_place: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
