from __future__ import annotations

from typing import Optional

from src.core.context import RequestContext
from src.db.models.todo import Priority, Todo
from src.db.session import ConnectionFactory
from .base import Repository


class PriorityRepository(Repository[Priority]):
    """Repository for todo priorities."""

    def __init__(self, connection_factory: ConnectionFactory, context: Optional[RequestContext] = None) -> None:
        super().__init__(Priority, connection_factory, context)


class TodoRepository(Repository[Todo]):
    """Repository for todos."""

    def __init__(self, connection_factory: ConnectionFactory, context: Optional[RequestContext] = None) -> None:
        super().__init__(Todo, connection_factory, context)
