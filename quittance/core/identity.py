"""
Recover the calling identity from inbound request headers.

Expects exactly the form `Authorization: Bearer <token>`; the header name is
matched case-insensitively, the scheme prefix is not. Pure: no I/O.
"""
from __future__ import annotations

from typing import Mapping, Optional
from uuid import UUID

from quittance.core.errors import InvalidCredential, MissingOrInvalidCredential
from quittance.core.security import TokenService

AUTHORIZATION_HEADER = "Authorization"
BEARER_PREFIX = "Bearer "


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


# PUBLIC_INTERFACE
def extract_identity(headers: Mapping[str, str], token_service: TokenService) -> UUID:
    """
    Return the identity id carried by the request's bearer token.

    Raises:
        MissingOrInvalidCredential: header missing, other scheme, or empty token.
        InvalidToken: bad signature, wrong algorithm, malformed or expired token.
        InvalidCredential: the subject claim is not a valid identity id.
    """
    raw = _header(headers, AUTHORIZATION_HEADER)
    if not raw or not raw.startswith(BEARER_PREFIX):
        raise MissingOrInvalidCredential()
    token = raw[len(BEARER_PREFIX):].strip()
    if not token:
        raise MissingOrInvalidCredential()

    subject = token_service.validate(token)
    try:
        return UUID(subject)
    except ValueError:
        raise InvalidCredential() from None
