"""
Database seeding utilities for minimal reference data.

Seeds:
- Admin credential (username/email/password from settings)
- Default priorities (Low, Normal, High)

Usage:
  python -m src.db.run_migrations upgrade head
  python -m src.db.seed
"""

from __future__ import annotations

import logging
from typing import Optional

from src.core.context import RequestContext
from src.core.security import get_password_hash
from src.core.settings import get_app_settings
from src.db.models.security import UserAuth
from src.db.models.todo import Priority
from src.db.session import ConnectionFactory, get_credentials_session_factory, get_session_factory
from src.repositories.security import UserAuthRepository
from src.repositories.todo import PriorityRepository
from src.schemas.auth import UserProfile

logger = logging.getLogger(__name__)

DEFAULT_PRIORITIES = (("Low", 30), ("Normal", 20), ("High", 10))


# PUBLIC_INTERFACE
def seed_all(
    connection_factory: Optional[ConnectionFactory] = None,
    credentials_factory: Optional[ConnectionFactory] = None,
) -> None:
    """
    Seed the database with minimal reference data. Existing rows are left alone.

    The admin credential goes to credentials_factory; without one it goes to
    connection_factory when given, else to the configured credentials store.
    """
    settings = get_app_settings()
    factory = connection_factory or get_session_factory()
    if credentials_factory is None:
        credentials_factory = connection_factory or get_credentials_session_factory()
    context = RequestContext.for_profile(
        UserProfile(id=0, username="seed", email="", is_admin=True)
    )

    users = UserAuthRepository(credentials_factory, context)
    if users.get_by_username_or_email(settings.SEED_ADMIN_USERNAME) is None:
        users.insert(
            UserAuth(
                username=settings.SEED_ADMIN_USERNAME,
                email=settings.SEED_ADMIN_EMAIL,
                display_name="Administrator",
                password_hash=get_password_hash(settings.SEED_ADMIN_PASSWORD),
                is_admin=True,
            )
        )
        logger.info("Seeded admin user %s", settings.SEED_ADMIN_USERNAME)

    priorities = PriorityRepository(factory, context)
    existing = {p.name for p in priorities.all()}
    for name, rank in DEFAULT_PRIORITIES:
        if name not in existing:
            priorities.insert(Priority(name=name, rank=rank))
            logger.info("Seeded priority %s", name)


if __name__ == "__main__":
    from src.core.logging import configure_logging

    configure_logging()
    seed_all()
