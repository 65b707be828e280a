"""
tests/test_security.py -- Unit tests for quittance.core.security and settings.

Coverage:
  - CredentialHasher: round trip, salt uniqueness, fail-closed verification
  - TokenService: round trip, claim shape, expiry, wrong key, algorithm pinning
  - AppSettings: signing-key requirements
  - AuthService: password hashing runs in a worker thread
"""

from __future__ import annotations

import base64
import json
import threading
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from jose import jwt
from pydantic import ValidationError as SettingsValidationError

from quittance.core.errors import AuthenticationError, InvalidToken
from quittance.core.security import CredentialHasher, TokenConfig, TokenService
from quittance.core.settings import AppSettings
from quittance.schemas.auth import RegisterRequest
from quittance.services.auth import AuthService

from .conftest import TEST_SECRET


class TestCredentialHasher:
    """Argon2 digests verify their own password and nothing else."""

    def test_round_trip(self, hasher: CredentialHasher) -> None:
        digest = hasher.hash("password1")
        assert hasher.verify("password1", digest) is True

    def test_wrong_password(self, hasher: CredentialHasher) -> None:
        digest = hasher.hash("password1")
        assert hasher.verify("password2", digest) is False

    def test_phc_format(self, hasher: CredentialHasher) -> None:
        """Digests are self-describing argon2id PHC strings."""
        assert hasher.hash("password1").startswith("$argon2id$")

    def test_fresh_salt_per_hash(self, hasher: CredentialHasher) -> None:
        first = hasher.hash("same-password")
        second = hasher.hash("same-password")
        assert first != second
        assert hasher.verify("same-password", first)
        assert hasher.verify("same-password", second)

    @pytest.mark.parametrize("digest", ["", "not-a-digest", "$argon2id$v=19$garbage", "$2b$12$abcdef"])
    def test_malformed_digest_fails_closed(self, hasher: CredentialHasher, digest: str) -> None:
        """Unparseable or foreign digests return False instead of raising."""
        assert hasher.verify("password1", digest) is False

    def test_verify_dummy_is_always_false(self, hasher: CredentialHasher) -> None:
        assert hasher.verify_dummy("quittance-timing-dummy") is False
        assert hasher.verify_dummy("anything") is False

    def test_parameters_embedded_in_digest(self) -> None:
        """A digest made with other parameters still verifies: they travel with the digest."""
        cheap = CredentialHasher(memory_cost=1024, time_cost=1, parallelism=1)
        other = CredentialHasher(memory_cost=2048, time_cost=2, parallelism=1)
        digest = other.hash("password1")
        assert "m=2048" in digest
        assert cheap.verify("password1", digest) is True


class TestTokenService:
    """Tokens carry sub/iat/exp and are rejected on any tampering."""

    def test_round_trip(self, token_service: TokenService) -> None:
        user_id = uuid4()
        token = token_service.issue(user_id)
        assert token.count(".") == 2
        assert token_service.validate(token) == str(user_id)

    def test_claims_are_integer_seconds_with_24h_lifetime(self, token_service: TokenService) -> None:
        token = token_service.issue(uuid4())
        claims = jwt.get_unverified_claims(token)
        assert isinstance(claims["exp"], int)
        assert isinstance(claims["iat"], int)
        assert claims["exp"] - claims["iat"] == 24 * 3600

    def test_expired_token_rejected(self) -> None:
        """A token issued 25 hours ago has been expired for an hour."""
        past = datetime.now(tz=timezone.utc) - timedelta(hours=25)
        issuer = TokenService(TokenConfig(secret_key=TEST_SECRET), clock=lambda: past)
        token = issuer.issue(uuid4())
        with pytest.raises(InvalidToken):
            TokenService(TokenConfig(secret_key=TEST_SECRET)).validate(token)

    def test_wrong_key_rejected(self, token_service: TokenService) -> None:
        other = TokenService(TokenConfig(secret_key="another-secret-key-of-32-characters!!"))
        with pytest.raises(InvalidToken):
            token_service.validate(other.issue(uuid4()))

    def test_other_algorithm_rejected(self, token_service: TokenService) -> None:
        """Only the configured algorithm is accepted, even with the right key."""
        hs512 = TokenService(TokenConfig(secret_key=TEST_SECRET, algorithm="HS512"))
        with pytest.raises(InvalidToken):
            token_service.validate(hs512.issue(uuid4()))

    def test_alg_none_rejected(self, token_service: TokenService) -> None:
        def b64(data: dict) -> str:
            raw = json.dumps(data).encode()
            return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()

        exp = int((datetime.now(tz=timezone.utc) + timedelta(hours=1)).timestamp())
        unsigned = f"{b64({'alg': 'none', 'typ': 'JWT'})}.{b64({'sub': str(uuid4()), 'exp': exp})}."
        with pytest.raises(InvalidToken):
            token_service.validate(unsigned)

    def test_missing_subject_rejected(self, token_service: TokenService) -> None:
        exp = int((datetime.now(tz=timezone.utc) + timedelta(hours=1)).timestamp())
        token = jwt.encode({"exp": exp}, TEST_SECRET, algorithm="HS256")
        with pytest.raises(InvalidToken):
            token_service.validate(token)

    def test_missing_expiry_rejected(self, token_service: TokenService) -> None:
        token = jwt.encode({"sub": str(uuid4())}, TEST_SECRET, algorithm="HS256")
        with pytest.raises(InvalidToken):
            token_service.validate(token)

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_malformed_rejected(self, token_service: TokenService, token: str) -> None:
        with pytest.raises(InvalidToken):
            token_service.validate(token)

    def test_invalid_token_is_authentication_error(self) -> None:
        err = InvalidToken()
        assert isinstance(err, AuthenticationError)
        assert err.status_code == 401


class TestSigningKeySettings:
    """AppSettings refuses to run without a usable signing key."""

    def test_missing_key_without_debug_fails(self) -> None:
        with pytest.raises(SettingsValidationError):
            AppSettings(DEBUG=False, JWT_SECRET_KEY="")

    def test_short_key_fails(self) -> None:
        with pytest.raises(SettingsValidationError):
            AppSettings(DEBUG=False, JWT_SECRET_KEY="too-short")

    def test_debug_generates_key(self) -> None:
        settings = AppSettings(DEBUG=True, JWT_SECRET_KEY="")
        assert len(settings.JWT_SECRET_KEY) >= 32

    def test_explicit_key_kept(self) -> None:
        settings = AppSettings(DEBUG=False, JWT_SECRET_KEY=TEST_SECRET)
        assert settings.JWT_SECRET_KEY == TEST_SECRET
        assert TokenConfig.from_settings(settings).lifetime == timedelta(hours=24)


class _ThreadRecordingHasher(CredentialHasher):
    """Cheap hasher that remembers which thread ran each Argon2 call."""

    def __init__(self) -> None:
        self.threads: list[int] = []
        super().__init__(memory_cost=1024, time_cost=1, parallelism=1)
        self.threads.clear()

    def hash(self, password: str) -> str:
        self.threads.append(threading.get_ident())
        return super().hash(password)

    def verify(self, password: str, digest: str) -> bool:
        self.threads.append(threading.get_ident())
        return super().verify(password, digest)


class TestAuthServiceHashing:
    """Argon2 work runs in a worker thread, off the event loop."""

    def test_register_and_login_hash_off_the_loop(self, run_db, token_service: TokenService) -> None:
        hasher = _ThreadRecordingHasher()
        email = f"loop-{uuid4().hex[:8]}@example.com"

        async def scenario(maker):
            async with maker() as session:
                service = AuthService(session, hasher, token_service)
                loop_thread = threading.get_ident()
                await service.register(RegisterRequest(email=email, password="password1", name="Loop"))
                await service.login(email, "password1")
                with pytest.raises(AuthenticationError):
                    await service.login(f"ghost-{uuid4().hex[:8]}@example.com", "password1")
                return loop_thread

        loop_thread = run_db(scenario)
        assert len(hasher.threads) == 3
        assert loop_thread not in hasher.threads
