from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import exists, select

from quittance.db.models import User
from quittance.schemas.auth import RegisterRequest
from .base import BaseRepository


class UserRepository(BaseRepository):
    """Repository for registered identities."""

    async def get_user_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email.strip().lower())
        return await self.scalar_one_or_none(stmt)

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        return await self.scalar_one_or_none(stmt)

    async def email_exists(self, email: str) -> bool:
        stmt = select(exists().where(User.email == email.strip().lower()))
        result = await self.execute(stmt)
        return bool(result.scalar())

    async def create_user(self, payload: RegisterRequest, *, password_hash: str) -> User:
        user = User(
            email=payload.email.strip().lower(),
            password_hash=password_hash,
            name=payload.name,
            address=payload.address,
            phone=payload.phone,
            birth_date=payload.birth_date,
            birth_place=payload.birth_place,
        )
        return await self.save(user)
