import pytest
from pydantic import ValidationError

from src.core.context import RequestContext
from src.core.sessions import (
    SESSION_KEY_PREFIX,
    get_or_create_session,
    remove_session,
    save_session,
    session_key,
)
from src.schemas.auth import ANONYMOUS_USERNAME, UserProfile, UserSession, anonymous_profile


def test_unauthenticated_session_is_anonymous():
    session = UserSession(id="s1", user_auth_name="alice", email="a@example.com")
    profile = session.to_user_profile()
    assert profile == anonymous_profile()
    assert profile.username == ANONYMOUS_USERNAME


def test_authenticated_session_uses_auth_name_and_email():
    session = UserSession(
        id="s1",
        is_authenticated=True,
        user_auth_name="alice",
        email="alice@example.com",
        user_profile=UserProfile(id=7, username="stale", email="old@example.com", is_admin=True),
    )
    profile = session.to_user_profile()
    assert profile.username == "alice"
    assert profile.email == "alice@example.com"
    assert profile.id == 7
    assert profile.is_admin is True


def test_authenticated_session_without_embedded_profile():
    session = UserSession(id="s1", is_authenticated=True, user_auth_name="alice")
    profile = session.to_user_profile()
    assert (profile.id, profile.username, profile.email, profile.is_admin) == (0, "alice", "", False)


def test_profile_is_frozen():
    profile = UserProfile(username="alice")
    with pytest.raises(ValidationError):
        profile.username = "bob"


def test_session_key_prefix():
    assert session_key("abc") == SESSION_KEY_PREFIX + "abc" == "urn:iauthsession:abc"


def test_get_or_create_stores_new_session(cache):
    session = get_or_create_session(cache, "abc")
    assert session.id == "abc"
    assert session.is_authenticated is False
    assert cache.get(session_key("abc"))["id"] == "abc"


def test_saved_session_is_returned_on_next_request(cache):
    session = get_or_create_session(cache, "abc")
    session.is_authenticated = True
    session.user_auth_name = "alice"
    save_session(cache, session)

    again = get_or_create_session(cache, "abc")
    assert again.is_authenticated is True
    assert again.to_user_profile().username == "alice"
    assert again.last_modified >= session.created_at


def test_remove_session(cache):
    get_or_create_session(cache, "abc")
    remove_session(cache, "abc")
    assert cache.get(session_key("abc")) is None


def test_context_without_session_is_anonymous():
    assert RequestContext().profile == anonymous_profile()


def test_context_derives_profile_once():
    session = UserSession(id="s1", is_authenticated=True, user_auth_name="alice")
    context = RequestContext(session=session)

    first = context.profile
    session.user_auth_name = "changed"
    assert context.profile is first
    assert context.profile.username == "alice"


def test_context_for_profile():
    profile = UserProfile(id=1, username="seed", is_admin=True)
    assert RequestContext.for_profile(profile).profile is profile
