from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator
from uuid import uuid4

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from quittance.core.errors import AppError, from_storage_error
from quittance.core.logging import configure_logging, correlation_id_var, user_id_var
from quittance.core.security import CredentialHasher, TokenConfig, TokenService
from quittance.core.settings import get_app_settings
from quittance.db.run_migrations import main as run_alembic
from quittance.db.session import build_engine, build_session_maker, wait_for_database
from quittance.schemas.common import ErrorInfo, ErrorResponse, MessageResponse

# Routers
from quittance.api.routes.auth import router as auth_router
from quittance.api.routes.organizations import router as organizations_router
from quittance.api.routes.properties import router as properties_router
from quittance.api.routes.tenants import router as tenants_router
from quittance.api.routes.leases import router as leases_router
from quittance.api.routes.receipts import router as receipts_router

settings = get_app_settings()

# Logging must be configured before any module logger emits
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Health", "description": "Liveness probe."},
    {"name": "Auth", "description": "Registration, login and current identity."},
    {"name": "Organizations", "description": "Organizations (SCI) and their members."},
    {"name": "Properties", "description": "Rental properties, owned directly or by an organization."},
    {"name": "Tenants", "description": "Residents renting a property."},
    {"name": "Leases", "description": "Rental agreements."},
    {"name": "Receipts", "description": "Monthly rent receipts."},
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Startup: wait for the database, migrate, then build the shared auth services.
    Shutdown: dispose of the engine.

    A database that never answers aborts startup after the configured attempts.
    """
    logger.info("Quittance API starting up")
    engine = build_engine()
    await wait_for_database(
        engine,
        max_attempts=settings.DB_CONNECT_MAX_ATTEMPTS,
        initial_delay=settings.DB_CONNECT_INITIAL_DELAY,
        max_delay=settings.DB_CONNECT_MAX_DELAY,
    )

    if settings.RUN_MIGRATIONS_ON_STARTUP:
        logger.info("Running Alembic migrations: upgrade head")
        # env.py drives its own event loop, so it cannot share this one.
        await asyncio.to_thread(run_alembic, ["upgrade", "head"])
        logger.info("Migrations completed.")

    app.state.engine = engine
    app.state.session_maker = build_session_maker(engine)
    app.state.token_service = TokenService(TokenConfig.from_settings(settings))
    app.state.hasher = CredentialHasher.from_settings(settings)
    logger.info("Auth services initialized")

    yield

    await engine.dispose()
    logger.info("Quittance API shutdown complete")


app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    openapi_tags=openapi_tags,
    lifespan=lifespan,
)

# Browsers reject credentials with a wildcard origin
cors_allow_credentials = settings.CORS_ALLOW_CREDENTIALS
if settings.CORS_ORIGINS == ["*"] and cors_allow_credentials:
    logger.warning("CORS_ALLOW_CREDENTIALS=True with '*' origins is not permitted; disabling credentials.")
    cors_allow_credentials = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=cors_allow_credentials,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """
    Attach a correlation id to the request for logging and error responses.
    Adds 'X-Correlation-ID' to every response.
    """
    corr = request.headers.get("X-Correlation-ID") or request.headers.get("X-Request-ID") or str(uuid4())
    token_corr = correlation_id_var.set(corr)
    token_user = user_id_var.set(None)
    request.state.correlation_id = corr

    logger.info("Incoming request %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
    finally:
        correlation_id_var.reset(token_corr)
        user_id_var.reset(token_user)

    response.headers["X-Correlation-ID"] = corr
    return response


def _build_error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    details: Any | None = None,
) -> JSONResponse:
    """Build a standardized ErrorResponse JSONResponse."""
    err = ErrorResponse(
        status=status_code,
        error=ErrorInfo(type=error_type, message=message, details=details),
        correlation_id=getattr(request.state, "correlation_id", None),
        path=request.url.path,
        method=request.method,
        timestamp=datetime.now(tz=timezone.utc),
    )
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(status_code=status_code, content=err.model_dump(mode="json"), headers=headers)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Map domain errors to their status code with the generic message they carry."""
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return _build_error_response(
        request=request,
        status_code=exc.status_code,
        error_type=exc.error_type,
        message=exc.message,
        details=exc.details,
    )


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    """
    Storage failures that escaped the services: retryable ones become 503,
    everything else 500. The driver message is logged, never returned.
    """
    logger.exception("Storage error processing request")
    err = from_storage_error(exc)
    return _build_error_response(
        request=request,
        status_code=err.status_code,
        error_type=err.error_type,
        message=err.message,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Routing and framework errors (unknown path, wrong method) in the common envelope."""
    if isinstance(exc.detail, str):
        message, details = exc.detail, None
    else:
        message, details = "HTTP Error", exc.detail
    return _build_error_response(
        request=request,
        status_code=exc.status_code,
        error_type="http_error",
        message=message,
        details=details,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Body, path or query parameters that do not match the declared schema: 422."""
    return _build_error_response(
        request=request,
        status_code=422,
        error_type="validation_error",
        message="Request validation failed",
        details=exc.errors(),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Last resort: log the traceback, answer with an opaque 500."""
    logger.exception("Unhandled error processing request")
    return _build_error_response(
        request=request,
        status_code=500,
        error_type="internal_error",
        message="An unexpected error occurred",
    )


api_v1 = APIRouter(prefix="/api/v1")


# PUBLIC_INTERFACE
@api_v1.get("/health", response_model=MessageResponse, summary="Health Check", tags=["Health"])
def health_check() -> MessageResponse:
    """Liveness probe; does not touch the database."""
    return MessageResponse(message="Healthy")


for _router in (
    auth_router,
    organizations_router,
    properties_router,
    tenants_router,
    leases_router,
    receipts_router,
):
    api_v1.include_router(_router)

app.include_router(api_v1)
