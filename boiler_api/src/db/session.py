from __future__ import annotations

from typing import Callable

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from .config import get_settings

# Anything that hands out a fresh ORM session; one call = one connection.
ConnectionFactory = Callable[[], Session]

_ENGINE: Engine | None = None
_SESSION_FACTORY: sessionmaker[Session] | None = None


def _ensure_engine_initialized() -> None:
    """
    Lazily initialize the Engine and session factory.
    """
    global _ENGINE, _SESSION_FACTORY
    if _ENGINE is None:
        settings = get_settings()
        _ENGINE = create_engine(
            settings.sync_database_url,
            echo=settings.SQL_ECHO,
            pool_pre_ping=True,
        )
    if _SESSION_FACTORY is None:
        _SESSION_FACTORY = make_session_factory(_ENGINE)


# PUBLIC_INTERFACE
def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    """
    Build a session factory with the options repositories rely on: objects stay
    readable after commit and after the session is closed.
    """
    return sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


# PUBLIC_INTERFACE
def get_engine() -> Engine:
    """Return the global Engine instance."""
    _ensure_engine_initialized()
    assert _ENGINE is not None
    return _ENGINE


# PUBLIC_INTERFACE
def get_session_factory() -> sessionmaker[Session]:
    """Return the global session factory used as the repositories' connection factory."""
    _ensure_engine_initialized()
    assert _SESSION_FACTORY is not None
    return _SESSION_FACTORY


_CREDENTIALS_FACTORY: sessionmaker[Session] | None = None


# PUBLIC_INTERFACE
def get_credentials_session_factory() -> sessionmaker[Session]:
    """
    Session factory for the credentials store.

    With CREDENTIALS_DATABASE_URL set, credentials live in their own database
    and the user_auth table is created there on first use. Otherwise this is
    the main session factory.
    """
    global _CREDENTIALS_FACTORY
    if _CREDENTIALS_FACTORY is None:
        settings = get_settings()
        url = settings.credentials_database_url
        if url is None:
            return get_session_factory()
        engine = create_engine(url, echo=settings.SQL_ECHO, pool_pre_ping=True)
        create_credentials_schema(engine)
        _CREDENTIALS_FACTORY = make_session_factory(engine)
    return _CREDENTIALS_FACTORY


# PUBLIC_INTERFACE
def create_credentials_schema(engine: Engine) -> None:
    """Create the user_auth table on engine when it is missing."""
    from .models.security import UserAuth

    UserAuth.__table__.create(engine, checkfirst=True)
