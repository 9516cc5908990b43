from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.db.base import Base, IntPkMixin, TimestampMixin


class UserAuth(IntPkMixin, TimestampMixin, Base):
    """Credential record checked by the credentials login."""
    __tablename__ = "user_auth"

    username: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    display_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
