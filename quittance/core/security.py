"""
Password hashing and access-token primitives.

Both services are built once at startup from AppSettings and are immutable
afterwards, so they can be shared by concurrent requests without locking.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Union
from uuid import UUID

from jose import jwt
from jose.exceptions import JOSEError
from passlib.context import CryptContext

from quittance.core.errors import InternalError, InvalidToken
from quittance.core.settings import AppSettings

logger = logging.getLogger(__name__)

# Password used to build the timing-equalization digest for unknown e-mails.
_DUMMY_PASSWORD = "quittance-timing-dummy"


class CredentialHasher:
    """
    Argon2id password hashing.

    Digests are PHC strings ($argon2id$v=19$m=...,t=...,p=...$salt$hash) that carry
    their own parameters and salt, so verification needs nothing but the string.
    """

    def __init__(self, *, memory_cost: int = 19456, time_cost: int = 2, parallelism: int = 1) -> None:
        self._context = CryptContext(
            schemes=["argon2"],
            argon2__memory_cost=memory_cost,
            argon2__time_cost=time_cost,
            argon2__parallelism=parallelism,
        )
        self._dummy_digest = self.hash(_DUMMY_PASSWORD)

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "CredentialHasher":
        return cls(
            memory_cost=settings.ARGON2_MEMORY_COST,
            time_cost=settings.ARGON2_TIME_COST,
            parallelism=settings.ARGON2_PARALLELISM,
        )

    # PUBLIC_INTERFACE
    def hash(self, password: str) -> str:
        """Hash a password with a fresh random salt."""
        try:
            return self._context.hash(password)
        except Exception as exc:
            logger.exception("Password hashing failed")
            raise InternalError() from exc

    # PUBLIC_INTERFACE
    def verify(self, password: str, digest: str) -> bool:
        """
        Verify a password against a stored digest.

        Fails closed: a malformed digest, unsupported parameters or an engine
        error all return False rather than raising.
        """
        try:
            return bool(self._context.verify(password, digest))
        except Exception:
            logger.warning("Password verification error; treating as mismatch", exc_info=True)
            return False

    # PUBLIC_INTERFACE
    def verify_dummy(self, password: str) -> bool:
        """Spend one verification on a throwaway digest; always returns False."""
        self.verify(password, self._dummy_digest)
        return False


@dataclass(frozen=True)
class TokenConfig:
    """Signing parameters for access tokens. Rotating secret_key invalidates all issued tokens."""

    secret_key: str
    algorithm: str = "HS256"
    lifetime: timedelta = timedelta(hours=24)

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "TokenConfig":
        return cls(
            secret_key=settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            lifetime=timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS),
        )


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class TokenService:
    """Issues and validates stateless signed access tokens (JWS compact form)."""

    def __init__(self, config: TokenConfig, clock: Callable[[], datetime] = _utcnow) -> None:
        self._config = config
        self._clock = clock

    @property
    def lifetime(self) -> timedelta:
        return self._config.lifetime

    # PUBLIC_INTERFACE
    def issue(self, subject_id: Union[str, UUID]) -> str:
        """Create a signed token for the given identity, valid for the configured lifetime."""
        now = self._clock()
        claims: Dict[str, Any] = {
            "sub": str(subject_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self._config.lifetime).timestamp()),
        }
        return jwt.encode(claims, self._config.secret_key, algorithm=self._config.algorithm)

    # PUBLIC_INTERFACE
    def validate(self, token: str) -> str:
        """
        Verify signature, algorithm and expiry, then return the subject claim.

        Raises:
            InvalidToken: for any failure; the cause is logged at DEBUG only.
        """
        try:
            claims = jwt.decode(
                token,
                self._config.secret_key,
                algorithms=[self._config.algorithm],
                options={"require_exp": True, "require_sub": True},
            )
        except (JOSEError, ValueError, TypeError) as exc:
            logger.debug("Token rejected: %s", type(exc).__name__)
            raise InvalidToken() from None

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            raise InvalidToken()
        return subject
