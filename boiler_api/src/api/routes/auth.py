from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from src.core.deps import get_auth_service, get_user_session, set_session_cookie
from src.core.settings import get_app_settings
from src.schemas.auth import LoginRequest, SessionRead, UserSession
from src.schemas.common import MessageResponse
from src.services.auth import CredentialsAuthService

router = APIRouter(prefix="/auth", tags=["Auth"])


def _session_to_read(session: UserSession) -> SessionRead:
    return SessionRead(is_authenticated=session.is_authenticated, profile=session.to_user_profile())


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=SessionRead,
    summary="Login",
    description=(
        "Authenticate with username (or email) and password. The session becomes "
        "authenticated and moves to a new session id, sent back as a fresh cookie."
    ),
)
def login(
    payload: LoginRequest,
    response: Response,
    session: UserSession = Depends(get_user_session),
    service: CredentialsAuthService = Depends(get_auth_service),
) -> SessionRead:
    """Check credentials and authenticate the current session."""
    authenticated = service.authenticate(session, payload.username, payload.password)
    if authenticated is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    set_session_cookie(response, authenticated.id)
    return _session_to_read(authenticated)


# PUBLIC_INTERFACE
@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Logout",
    description="Drop the current session and clear the session cookie.",
)
def logout(
    response: Response,
    session: UserSession = Depends(get_user_session),
    service: CredentialsAuthService = Depends(get_auth_service),
) -> MessageResponse:
    """End the current session."""
    service.logout(session)
    response.delete_cookie(get_app_settings().SESSION_COOKIE_NAME)
    return MessageResponse(message="Logged out")


# PUBLIC_INTERFACE
@router.get(
    "/session",
    response_model=SessionRead,
    summary="Read current session",
    description="Return whether the session is authenticated and the profile derived from it.",
)
def read_session(session: UserSession = Depends(get_user_session)) -> SessionRead:
    """Return current session profile."""
    return _session_to_read(session)
