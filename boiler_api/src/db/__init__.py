"""
Database package initializer exposing key public interfaces for configuration,
engine/session management, and audit stamping.
"""

from .base import Base
from .config import get_settings, Settings
from .session import (
    ConnectionFactory,
    get_engine,
    get_session_factory,
    make_session_factory,
)

# Import models to ensure they are registered with SQLAlchemy metadata
# when the db package is imported.
from . import models as models  # noqa: F401

__all__ = [
    "Base",
    "Settings",
    "get_settings",
    "ConnectionFactory",
    "get_engine",
    "get_session_factory",
    "make_session_factory",
    "models",
]
