from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ANONYMOUS_USERNAME = "anonymous"


class UserProfile(BaseModel):
    """Lightweight view of the current actor, derived once per request."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(0, description="UserAuth id, 0 when unknown")
    username: str = Field(..., description="Username stamped on audited rows")
    email: str = Field("", description="User email")
    is_admin: bool = Field(False, description="Admin flag")


# PUBLIC_INTERFACE
def anonymous_profile() -> UserProfile:
    """Profile used for every unauthenticated session."""
    return UserProfile(id=0, username=ANONYMOUS_USERNAME, email="", is_admin=False)


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class UserSession(BaseModel):
    """Authenticated (or anonymous) session state persisted in the cache."""
    id: str = Field(..., description="Session id")
    is_authenticated: bool = Field(False)
    user_auth_id: Optional[int] = Field(None)
    user_auth_name: Optional[str] = Field(None)
    email: Optional[str] = Field(None)
    display_name: Optional[str] = Field(None)
    created_at: datetime = Field(default_factory=_utcnow)
    last_modified: datetime = Field(default_factory=_utcnow)
    user_profile: Optional[UserProfile] = Field(None, description="Profile embedded at login")

    def to_user_profile(self) -> UserProfile:
        if self.is_authenticated:
            embedded = self.user_profile
            return UserProfile(
                id=embedded.id if embedded else 0,
                username=self.user_auth_name or "",
                email=self.email or "",
                is_admin=embedded.is_admin if embedded else False,
            )
        return anonymous_profile()


class LoginRequest(BaseModel):
    """Credentials login payload; username may also be the account email."""
    username: str = Field(..., min_length=1, description="Username or email")
    password: str = Field(..., min_length=1, description="Password")


class SessionRead(BaseModel):
    """Current session as seen by the client."""
    is_authenticated: bool = Field(..., description="Whether the session is authenticated")
    profile: UserProfile = Field(..., description="Current profile")
