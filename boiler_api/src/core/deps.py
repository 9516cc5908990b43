from __future__ import annotations

from fastapi import Depends, HTTPException, Request, Response, status

from src.core.cache import CacheClient, get_cache_client
from src.core.context import RequestContext
from src.core.security import create_session_token, decode_session_token, new_session_id
from src.core.sessions import get_or_create_session
from src.core.settings import get_app_settings
from src.db.session import ConnectionFactory, get_credentials_session_factory, get_session_factory
from src.repositories.todo import PriorityRepository, TodoRepository
from src.schemas.auth import UserProfile, UserSession
from src.services.auth import CredentialsAuthService


# PUBLIC_INTERFACE
def get_connection_factory() -> ConnectionFactory:
    """Session factory handed to repositories; overridden in tests."""
    return get_session_factory()


# PUBLIC_INTERFACE
def get_credentials_connection_factory() -> ConnectionFactory:
    """Session factory for user_auth lookups; overridden in tests."""
    return get_credentials_session_factory()


# PUBLIC_INTERFACE
def get_cache() -> CacheClient:
    """Session cache client; overridden in tests."""
    return get_cache_client()


# PUBLIC_INTERFACE
def set_session_cookie(response: Response, session_id: str) -> None:
    """Write the signed session cookie carrying session_id."""
    settings = get_app_settings()
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        create_session_token(session_id),
        max_age=settings.SESSION_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )


# PUBLIC_INTERFACE
def get_session_id(request: Request, response: Response) -> str:
    """
    Read the session id from the signed session cookie.

    A missing, tampered or expired cookie yields a new session id, which is
    written back as a fresh cookie.
    """
    settings = get_app_settings()
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    session_id = decode_session_token(token) if token else None
    if session_id is None:
        session_id = new_session_id()
        set_session_cookie(response, session_id)
    return session_id


# PUBLIC_INTERFACE
def get_request_context(
    request: Request,
    session_id: str = Depends(get_session_id),
    cache: CacheClient = Depends(get_cache),
) -> RequestContext:
    """
    Resolve the request's session from the cache and wrap it in a RequestContext.

    Built once per request and kept on request.state; later resolutions in the
    same request return the same instance.
    """
    context = getattr(request.state, "request_context", None)
    if context is None:
        session = get_or_create_session(cache, session_id)
        context = RequestContext(
            session=session,
            correlation_id=getattr(request.state, "correlation_id", None),
        )
        request.state.request_context = context
    return context


# PUBLIC_INTERFACE
def get_user_session(context: RequestContext = Depends(get_request_context)) -> UserSession:
    if context.session is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Session not resolved for request"
        )
    return context.session


# PUBLIC_INTERFACE
def get_user_profile(context: RequestContext = Depends(get_request_context)) -> UserProfile:
    return context.profile


# PUBLIC_INTERFACE
def require_authenticated(session: UserSession = Depends(get_user_session)) -> UserSession:
    """Reject anonymous sessions with 401."""
    if not session.is_authenticated:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return session


# PUBLIC_INTERFACE
def require_admin(
    session: UserSession = Depends(require_authenticated),
    profile: UserProfile = Depends(get_user_profile),
) -> UserProfile:
    """Reject non-admin profiles with 403."""
    if not profile.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return profile


# PUBLIC_INTERFACE
def get_priority_repository(
    connection_factory: ConnectionFactory = Depends(get_connection_factory),
    context: RequestContext = Depends(get_request_context),
) -> PriorityRepository:
    return PriorityRepository(connection_factory, context)


# PUBLIC_INTERFACE
def get_todo_repository(
    connection_factory: ConnectionFactory = Depends(get_connection_factory),
    context: RequestContext = Depends(get_request_context),
) -> TodoRepository:
    return TodoRepository(connection_factory, context)


# PUBLIC_INTERFACE
def get_auth_service(
    connection_factory: ConnectionFactory = Depends(get_connection_factory),
    credentials_factory: ConnectionFactory = Depends(get_credentials_connection_factory),
    context: RequestContext = Depends(get_request_context),
    cache: CacheClient = Depends(get_cache),
) -> CredentialsAuthService:
    return CredentialsAuthService(connection_factory, context, cache, credentials_factory)
