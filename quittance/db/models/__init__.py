"""
ORM models for identities, organizations and the rental domain
(properties, tenants, leases, receipts).

Importing this package ensures model classes are registered with the Base
metadata for Alembic and runtime usage.
"""

from .identity import User  # noqa: F401
from .organization import (  # noqa: F401
    OWNER_ROLE,
    Organization,
    OrganizationMember,
)
from .property import Property  # noqa: F401
from .tenant import Tenant  # noqa: F401
from .lease import Lease  # noqa: F401
from .receipt import Receipt  # noqa: F401
