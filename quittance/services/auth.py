from __future__ import annotations

import logging
from typing import Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from quittance.core.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from quittance.core.security import CredentialHasher, TokenService
from quittance.db.models import User
from quittance.repositories.identity import UserRepository
from quittance.schemas.auth import RegisterRequest
from quittance.services.base import BaseService

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
INVALID_LOGIN_MESSAGE = "Invalid email or password"


class AuthService(BaseService):
    """
    Registration, login and identity lookup.

    Login always performs exactly one password verification so that the
    response time does not reveal whether an e-mail is registered.
    """

    def __init__(self, session: AsyncSession, hasher: CredentialHasher, tokens: TokenService) -> None:
        super().__init__(session)
        self.hasher = hasher
        self.tokens = tokens
        self.users = UserRepository(session)

    # PUBLIC_INTERFACE
    async def register(self, payload: RegisterRequest) -> Tuple[User, str]:
        """
        Create an account and issue its first token.

        Raises:
            ValidationError: e-mail without '@' or password shorter than 8 characters.
            ConflictError: e-mail already registered (case-insensitive).
        """
        email = payload.email.strip().lower()
        if "@" not in email:
            raise ValidationError("Invalid email address")
        if len(payload.password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if await self.users.email_exists(email):
            raise ConflictError("Email already registered")

        digest = await run_in_threadpool(self.hasher.hash, payload.password)
        try:
            user = await self.users.create_user(payload, password_hash=digest)
        except IntegrityError:
            # Concurrent registration of the same e-mail.
            raise ConflictError("Email already registered") from None
        logger.info("Registered user %s", user.id)
        return user, self.tokens.issue(user.id)

    # PUBLIC_INTERFACE
    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """Verify credentials; any failure raises the same AuthenticationError."""
        user = await self.users.get_user_by_email(email)
        if user is None:
            await run_in_threadpool(self.hasher.verify_dummy, password)
            logger.info("Login failed: unknown email")
            raise AuthenticationError(INVALID_LOGIN_MESSAGE)
        if not await run_in_threadpool(self.hasher.verify, password, user.password_hash):
            logger.info("Login failed for user %s", user.id)
            raise AuthenticationError(INVALID_LOGIN_MESSAGE)
        return user, self.tokens.issue(user.id)

    # PUBLIC_INTERFACE
    async def me(self, user_id: UUID) -> User:
        """Load the authenticated identity."""
        user = await self.users.get_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user
