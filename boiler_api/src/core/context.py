from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import Optional

from src.schemas.auth import UserProfile, UserSession, anonymous_profile


@dataclass
class RequestContext:
    """
    Per-request state threaded into repositories and the audit filter.

    The profile is derived from the session on first access and reused for the
    rest of the request.
    """

    session: Optional[UserSession] = None
    correlation_id: Optional[str] = None
    _fixed_profile: Optional[UserProfile] = field(default=None, repr=False)

    @cached_property
    def profile(self) -> UserProfile:
        if self._fixed_profile is not None:
            return self._fixed_profile
        if self.session is None:
            return anonymous_profile()
        return self.session.to_user_profile()

    @classmethod
    def for_profile(cls, profile: UserProfile) -> "RequestContext":
        """Context for work done outside a request (seeding, scripts)."""
        return cls(_fixed_profile=profile)
