from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from src.core.settings import get_app_settings

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# PUBLIC_INTERFACE
def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password using bcrypt."""
    return _pwd_context.verify(plain_password, hashed_password)


# PUBLIC_INTERFACE
def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    return _pwd_context.hash(password)


# PUBLIC_INTERFACE
def new_session_id() -> str:
    """Return a fresh random session identifier."""
    return secrets.token_urlsafe(24)


# PUBLIC_INTERFACE
def create_session_token(session_id: str, expires_minutes: Optional[int] = None) -> str:
    """Sign a session id into the token carried by the session cookie."""
    settings = get_app_settings()
    now = datetime.now(tz=timezone.utc)
    expire = now + timedelta(minutes=expires_minutes or settings.SESSION_EXPIRE_MINUTES)
    payload = {"sid": session_id, "iat": now, "exp": expire, "type": "session"}
    return jwt.encode(payload, settings.SESSION_SECRET_KEY, algorithm=settings.SESSION_ALGORITHM)


# PUBLIC_INTERFACE
def decode_session_token(token: str) -> Optional[str]:
    """Return the session id carried by a cookie token, or None when it is invalid or expired."""
    settings = get_app_settings()
    try:
        claims = jwt.decode(token, settings.SESSION_SECRET_KEY, algorithms=[settings.SESSION_ALGORITHM])
    except JWTError:
        return None
    if claims.get("type") != "session":
        return None
    sid = claims.get("sid")
    return sid if isinstance(sid, str) and sid else None
