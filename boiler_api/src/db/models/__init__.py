"""
ORM models for todos, priorities and credentials.

Importing this package ensures model classes are registered with the Base
metadata for Alembic and runtime usage.
"""

from .todo import (  # noqa: F401
    Priority,
    Todo,
)
from .security import (  # noqa: F401
    UserAuth,
)
