"""
Domain error types raised by the data-access layer.

The HTTP layer maps each kind to a status code (see src.api.main), so callers
can tell a missing row from a bad request or a dead database.
"""
from __future__ import annotations

from typing import Any, Optional


class RepositoryError(Exception):
    """Base class for all repository errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class NotFound(RepositoryError):
    """Raised when a row addressed by id does not exist."""

    def __init__(self, entity: str, entity_id: Any) -> None:
        super().__init__(
            f"Record not found: {entity} with id {entity_id}",
            {"entity": entity, "id": entity_id},
        )


class InvalidOperation(RepositoryError):
    """Raised when an operation cannot be applied to the given model."""


class ConnectionFailure(RepositoryError):
    """Raised when a backing-store connection cannot be acquired."""


class QueryAmbiguity(RepositoryError):
    """Raised when a single-result query matches zero or several rows."""

    def __init__(self, entity: str, matched: str) -> None:
        super().__init__(
            f"Expected exactly one {entity}, found {matched}",
            {"entity": entity, "matched": matched},
        )
