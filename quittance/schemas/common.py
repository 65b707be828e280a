from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

ErrorType = Literal[
    "validation_error",
    "authentication_error",
    "not_found",
    "conflict",
    "internal_error",
    "service_unavailable",
    "http_error",
]


class MessageResponse(BaseModel):
    """Acknowledgement for health checks and deletions."""
    message: str = Field(..., description="Human readable message")


class ErrorInfo(BaseModel):
    """
    Machine-readable error code plus a generic, client-safe message.

    "not_found" covers both a missing row and a row the caller may not access;
    the two are indistinguishable. "service_unavailable" (503) marks
    a storage failure worth retrying. Driver messages never appear here.
    """
    type: ErrorType = Field(..., description="Error code")
    message: str = Field(..., description="Client-safe message")
    details: Optional[Any] = Field(default=None, description="Schema validation issues, when any")


# PUBLIC_INTERFACE
class ErrorResponse(BaseModel):
    """Body of every non-2xx response produced by the exception handlers."""
    status: int = Field(..., description="HTTP status code")
    error: ErrorInfo = Field(...)
    correlation_id: Optional[str] = Field(default=None, description="Echo of X-Correlation-ID")
    path: str = Field(..., description="Request path")
    method: str = Field(..., description="HTTP method")
    timestamp: datetime = Field(..., description="When the error was produced (UTC)")
