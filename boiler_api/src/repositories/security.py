from __future__ import annotations

from typing import Optional

from sqlalchemy import func

from src.core.context import RequestContext
from src.db.models.security import UserAuth
from src.db.session import ConnectionFactory
from .base import Repository


class UserAuthRepository(Repository[UserAuth]):
    """Repository for credential records."""

    def __init__(self, connection_factory: ConnectionFactory, context: Optional[RequestContext] = None) -> None:
        super().__init__(UserAuth, connection_factory, context)

    def get_by_username_or_email(self, name: str) -> Optional[UserAuth]:
        """
        Look up a credential by exact username, falling back to a
        case-insensitive email match. Storage errors propagate.
        """
        by_username = self.where(UserAuth.username == name)
        if by_username:
            return by_username[0]
        by_email = self.where(func.lower(UserAuth.email) == name.lower())
        return by_email[0] if by_email else None
