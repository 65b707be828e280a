from __future__ import annotations

from typing import AsyncGenerator
from uuid import UUID

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from quittance.core.identity import extract_identity
from quittance.core.logging import user_id_var
from quittance.core.security import CredentialHasher, TokenService

# PUBLIC_INTERFACE
async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield one AsyncSession per request from the session factory built at startup.

    The session is closed after the response; uncommitted work is rolled back.
    """
    async with request.app.state.session_maker() as session:
        yield session

# PUBLIC_INTERFACE
def get_token_service(request: Request) -> TokenService:
    """Return the process-wide TokenService."""
    return request.app.state.token_service

# PUBLIC_INTERFACE
def get_hasher(request: Request) -> CredentialHasher:
    """Return the process-wide CredentialHasher."""
    return request.app.state.hasher

# PUBLIC_INTERFACE
async def get_current_user_id(
    request: Request,
    token_service: TokenService = Depends(get_token_service),
) -> UUID:
    """
    Resolve the caller's identity id from the Authorization bearer token.

    Raises:
        AuthenticationError: handled globally as 401.
    """
    identity_id = extract_identity(request.headers, token_service)
    user_id_var.set(str(identity_id))
    request.state.user_id = str(identity_id)
    return identity_id
