from __future__ import annotations

import logging
from datetime import datetime, timezone

from src.core.cache import CacheClient
from src.core.settings import get_app_settings
from src.schemas.auth import UserSession

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "urn:iauthsession:"


# PUBLIC_INTERFACE
def session_key(session_id: str) -> str:
    """Cache key under which a session is stored."""
    return f"{SESSION_KEY_PREFIX}{session_id}"


# PUBLIC_INTERFACE
def get_or_create_session(cache: CacheClient, session_id: str) -> UserSession:
    """
    Fetch the session stored for session_id, creating and storing a fresh
    unauthenticated session when none exists.
    """
    data = cache.get(session_key(session_id))
    if data is not None:
        return UserSession.model_validate(data)

    logger.debug("Creating new session")
    session = UserSession(id=session_id)
    save_session(cache, session)
    return session


# PUBLIC_INTERFACE
def save_session(cache: CacheClient, session: UserSession) -> None:
    """Persist the session, refreshing its expiry."""
    settings = get_app_settings()
    session.last_modified = datetime.now(tz=timezone.utc)
    cache.set(
        session_key(session.id),
        session.model_dump(mode="json"),
        expires_in=settings.SESSION_EXPIRE_MINUTES * 60,
    )


# PUBLIC_INTERFACE
def remove_session(cache: CacheClient, session_id: str) -> None:
    cache.remove(session_key(session_id))
