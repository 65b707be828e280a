from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from quittance.core.deps import get_current_user_id, get_hasher, get_session, get_token_service
from quittance.core.security import CredentialHasher, TokenService
from quittance.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserRead
from quittance.services.auth import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])


def _service(
    session: AsyncSession = Depends(get_session),
    hasher: CredentialHasher = Depends(get_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(session, hasher, tokens)


# PUBLIC_INTERFACE
@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an account and return a bearer token valid for 24 hours. E-mails are case-insensitive.",
)
async def register(payload: RegisterRequest, service: AuthService = Depends(_service)) -> AuthResponse:
    user, token = await service.register(payload)
    return AuthResponse(token=token, user=UserRead.model_validate(user))


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login",
    description="Exchange e-mail and password for a bearer token.",
)
async def login(payload: LoginRequest, service: AuthService = Depends(_service)) -> AuthResponse:
    user, token = await service.login(payload.email, payload.password)
    return AuthResponse(token=token, user=UserRead.model_validate(user))


# PUBLIC_INTERFACE
@router.get(
    "/me",
    response_model=UserRead,
    summary="Current user",
    description="Return the identity carried by the bearer token.",
)
async def me(
    user_id: UUID = Depends(get_current_user_id),
    service: AuthService = Depends(_service),
) -> UserRead:
    return UserRead.model_validate(await service.me(user_id))
