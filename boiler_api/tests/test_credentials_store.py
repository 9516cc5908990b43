import pytest
from sqlalchemy import create_engine, inspect
from sqlalchemy.pool import StaticPool

import src.db.session as db_session
from src.core.context import RequestContext
from src.core.security import get_password_hash
from src.core.sessions import get_or_create_session, session_key
from src.db.models.security import UserAuth
from src.db.seed import seed_all
from src.repositories.security import UserAuthRepository
from src.repositories.todo import PriorityRepository
from src.services.auth import CredentialsAuthService


@pytest.fixture
def credentials_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    db_session.create_credentials_schema(engine)
    yield db_session.make_session_factory(engine)
    engine.dispose()


def test_credentials_schema_holds_only_user_auth(credentials_factory):
    engine = credentials_factory.kw["bind"]
    assert inspect(engine).get_table_names() == ["user_auth"]
    # idempotent
    db_session.create_credentials_schema(engine)


def test_login_reads_separate_credentials_store(session_factory, credentials_factory, cache):
    with credentials_factory() as s:
        s.add(UserAuth(username="carol", email="carol@example.com", password_hash=get_password_hash("pw")))
        s.commit()

    session = get_or_create_session(cache, "before")
    context = RequestContext(session=session)

    main_only = CredentialsAuthService(session_factory, context, cache)
    assert main_only.authenticate(session, "carol", "pw") is None

    service = CredentialsAuthService(session_factory, context, cache, credentials_factory)
    authenticated = service.authenticate(session, "carol", "pw")
    assert authenticated is not None
    assert authenticated.id != "before"
    assert cache.get(session_key("before")) is None
    assert cache.get(session_key(authenticated.id))["user_auth_name"] == "carol"


def test_seed_writes_admin_to_credentials_store(session_factory, credentials_factory):
    seed_all(session_factory, credentials_factory)

    assert UserAuthRepository(credentials_factory).get_by_username_or_email("admin") is not None
    assert UserAuthRepository(session_factory).all() == []
    assert len(PriorityRepository(session_factory).all()) == 3


def test_credentials_factory_from_settings(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'credentials.db'}"
    monkeypatch.setenv("CREDENTIALS_DATABASE_URL", url)
    monkeypatch.setattr(db_session, "_CREDENTIALS_FACTORY", None)

    factory = db_session.get_credentials_session_factory()
    assert db_session.get_credentials_session_factory() is factory
    engine = factory.kw["bind"]
    assert str(engine.url) == url
    assert "user_auth" in inspect(engine).get_table_names()
    engine.dispose()


def test_credentials_factory_defaults_to_main(monkeypatch):
    monkeypatch.delenv("CREDENTIALS_DATABASE_URL", raising=False)
    monkeypatch.setattr(db_session, "_CREDENTIALS_FACTORY", None)
    assert db_session.get_credentials_session_factory() is db_session.get_session_factory()
