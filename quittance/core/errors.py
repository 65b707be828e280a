"""
Domain error kinds raised by the auth core, repositories and services.

The API layer maps each kind to a fixed status code and a generic message
(see quittance.api.main). Details meant for operators go to the log, never to
the response.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import exc as sa_exc

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that are safe to surface to API callers."""

    status_code: int = 500
    error_type: str = "internal_error"
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, details: Any | None = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed input: bad e-mail shape, short password, out-of-range period."""

    status_code = 400
    error_type = "validation_error"
    default_message = "Invalid input"


class AuthenticationError(AppError):
    """Bad credentials or a missing, invalid or expired token."""

    status_code = 401
    error_type = "authentication_error"
    default_message = "Invalid credentials"


class InvalidToken(AuthenticationError):
    default_message = "Invalid token"


class MissingOrInvalidCredential(AuthenticationError):
    default_message = "Missing or invalid authorization header"


class InvalidCredential(AuthenticationError):
    default_message = "Invalid token"


class NotFoundError(AppError):
    """Resource absent, or present but not accessible to the caller."""

    status_code = 404
    error_type = "not_found"
    default_message = "Resource not found"


class ConflictError(AppError):
    """Duplicate registration e-mail, duplicate receipt period."""

    status_code = 409
    error_type = "conflict"
    default_message = "Resource already exists"


class InternalError(AppError):
    """
    Hashing engine or storage failure.

    retryable marks transient storage conditions (pool exhausted, connection
    dropped) that a client may retry; those are reported as 503.
    """

    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable
        if retryable:
            self.status_code = 503
            self.error_type = "service_unavailable"
            if message is None:
                self.message = "Service temporarily unavailable"


# PUBLIC_INTERFACE
def from_storage_error(exc: sa_exc.SQLAlchemyError) -> InternalError:
    """
    Classify a SQLAlchemy error as a retryable or fatal InternalError.

    Pool checkout timeouts and connection-level driver errors are transient;
    everything else (integrity violations that escaped a service check,
    programming errors, bad SQL) is fatal.
    """
    if isinstance(exc, (sa_exc.TimeoutError, sa_exc.OperationalError, sa_exc.InterfaceError)):
        return InternalError(retryable=True)
    if isinstance(exc, sa_exc.DBAPIError) and exc.connection_invalidated:
        return InternalError(retryable=True)
    return InternalError()
