from __future__ import annotations

import logging
from typing import Optional

from src.core.cache import CacheClient
from src.core.context import RequestContext
from src.core.security import new_session_id, verify_password
from src.core.sessions import remove_session, save_session
from src.db.session import ConnectionFactory
from src.repositories.security import UserAuthRepository
from src.schemas.auth import UserProfile, UserSession
from src.services.base import BaseService

logger = logging.getLogger(__name__)


class CredentialsAuthService(BaseService):
    """
    Username/password authentication against the user_auth table.

    A successful login turns the request's cached session into an
    authenticated one and moves it to a freshly issued session id, so an id
    known before login is worthless afterwards.
    """

    def __init__(
        self,
        connection_factory: ConnectionFactory,
        context: RequestContext,
        cache: CacheClient,
        credentials_factory: Optional[ConnectionFactory] = None,
    ) -> None:
        super().__init__(connection_factory, context)
        self.cache = cache
        # credentials may live in a separate database
        self.users = UserAuthRepository(credentials_factory or connection_factory, context)

    # PUBLIC_INTERFACE
    def authenticate(self, session: UserSession, username: str, password: str) -> Optional[UserSession]:
        """
        Check the credentials and, when valid, mark session authenticated and
        re-key it under a new session id. The old cache entry is removed.

        Returns:
            The updated session, or None when the credentials are rejected.
        """
        user = self.users.get_by_username_or_email(username)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Rejected credentials login for %s", username)
            return None

        session.is_authenticated = True
        session.user_auth_id = user.id
        session.user_auth_name = user.username
        session.email = user.email
        session.display_name = user.display_name
        session.user_profile = UserProfile(
            id=user.id, username=user.username, email=user.email, is_admin=user.is_admin
        )
        previous_id = session.id
        session.id = new_session_id()
        save_session(self.cache, session)
        remove_session(self.cache, previous_id)
        logger.info("User %s authenticated", user.username)
        return session

    # PUBLIC_INTERFACE
    def logout(self, session: UserSession) -> None:
        """Drop the session from the cache."""
        remove_session(self.cache, session.id)
