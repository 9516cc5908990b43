from __future__ import annotations

from src.core.context import RequestContext
from src.db.session import ConnectionFactory


class BaseService:
    """
    Base class for services. Holds the connection factory and request context
    that every repository a service builds must share.

    Services should keep business logic and orchestration, delegating data access
    to repositories.
    """

    def __init__(self, connection_factory: ConnectionFactory, context: RequestContext) -> None:
        self.connection_factory = connection_factory
        self.context = context
