"""
tests/test_identity.py -- Unit tests for quittance.core.identity.extract_identity.

The extractor is pure, so plain dicts stand in for request headers.
"""

from __future__ import annotations

from uuid import UUID, uuid4

import pytest

from quittance.core.errors import (
    AuthenticationError,
    InvalidCredential,
    InvalidToken,
    MissingOrInvalidCredential,
)
from quittance.core.identity import extract_identity
from quittance.core.security import TokenService


class TestExtractIdentity:
    def test_valid_bearer_token(self, token_service: TokenService) -> None:
        user_id = uuid4()
        headers = {"Authorization": f"Bearer {token_service.issue(user_id)}"}
        assert extract_identity(headers, token_service) == user_id

    def test_header_name_is_case_insensitive(self, token_service: TokenService) -> None:
        user_id = uuid4()
        headers = {"authorization": f"Bearer {token_service.issue(user_id)}"}
        assert extract_identity(headers, token_service) == user_id

    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {"Authorization": ""},
            {"Authorization": "Basic dXNlcjpwYXNz"},
            {"Authorization": "bearer abc.def.ghi"},
            {"Authorization": "Bearer "},
            {"Authorization": "Bearer    "},
            {"Authorization": "Token abc"},
        ],
    )
    def test_missing_or_malformed_header(self, token_service: TokenService, headers: dict) -> None:
        """Absent header, other schemes, lowercase prefix and empty tokens are all rejected up front."""
        with pytest.raises(MissingOrInvalidCredential):
            extract_identity(headers, token_service)

    def test_invalid_token(self, token_service: TokenService) -> None:
        with pytest.raises(InvalidToken):
            extract_identity({"Authorization": "Bearer not.a.token"}, token_service)

    def test_subject_not_a_uuid(self, token_service: TokenService) -> None:
        token = token_service.issue("definitely-not-a-uuid")
        with pytest.raises(InvalidCredential):
            extract_identity({"Authorization": f"Bearer {token}"}, token_service)

    def test_all_failures_are_authentication_errors(self) -> None:
        for kind in (MissingOrInvalidCredential, InvalidToken, InvalidCredential):
            assert issubclass(kind, AuthenticationError)
            assert kind().status_code == 401

    def test_returns_uuid_type(self, token_service: TokenService) -> None:
        headers = {"Authorization": f"Bearer {token_service.issue(str(uuid4()))}"}
        assert isinstance(extract_identity(headers, token_service), UUID)
