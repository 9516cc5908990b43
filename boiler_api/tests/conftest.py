import os

# Settings are read from the environment at import time; keep startup inert.
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")
os.environ.setdefault("AUTO_SEED", "false")
os.environ.setdefault("SESSION_SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from src.core.cache import MemoryCacheClient
from src.core.context import RequestContext
from src.core.security import get_password_hash
from src.db import models  # noqa: F401
from src.db.audit import register_audit_filters
from src.db.base import Base
from src.db.models.security import UserAuth
from src.db.session import make_session_factory
from src.schemas.auth import UserProfile

register_audit_filters()


@pytest.fixture
def engine():
    """Fresh in-memory database per test, shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def cache():
    return MemoryCacheClient()


@pytest.fixture
def alice():
    return RequestContext.for_profile(
        UserProfile(id=7, username="alice", email="alice@example.com", is_admin=False)
    )


@pytest.fixture
def bob():
    return RequestContext.for_profile(
        UserProfile(id=8, username="bob", email="bob@example.com", is_admin=False)
    )


@pytest.fixture
def make_user(session_factory):
    def _make(username, password="secret", email=None, is_admin=False):
        with session_factory() as s:
            user = UserAuth(
                username=username,
                email=email or f"{username}@example.com",
                display_name=username.title(),
                password_hash=get_password_hash(password),
                is_admin=is_admin,
            )
            s.add(user)
            s.commit()
            return user

    return _make


@pytest.fixture
def client(session_factory, cache):
    from src.api.main import app
    from src.core.deps import get_cache, get_connection_factory, get_credentials_connection_factory

    app.dependency_overrides[get_connection_factory] = lambda: session_factory
    app.dependency_overrides[get_credentials_connection_factory] = lambda: session_factory
    app.dependency_overrides[get_cache] = lambda: cache
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
