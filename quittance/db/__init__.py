"""
Database package initializer exposing configuration, engine/session factories
and the startup connectivity probe.
"""

from .base import Base
from .config import get_settings, Settings
from .session import (
    build_engine,
    build_session_maker,
    wait_for_database,
)

# Import models to ensure they are registered with SQLAlchemy metadata
# when the db package is imported.
from . import models as models  # noqa: F401

__all__ = [
    "Base",
    "Settings",
    "get_settings",
    "build_engine",
    "build_session_maker",
    "wait_for_database",
    "models",
]
