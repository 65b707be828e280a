"""
Public Pydantic schemas used by FastAPI routes, services, and tests.

Schemas are grouped by domain module (auth, organizations, properties,
tenants, leases, receipts) plus the common error envelope.
"""

from .common import ErrorResponse, MessageResponse  # noqa: F401
