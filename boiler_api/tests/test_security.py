from jose import jwt

from src.core.security import (
    create_session_token,
    decode_session_token,
    get_password_hash,
    new_session_id,
    verify_password,
)


def test_session_token_round_trip():
    sid = new_session_id()
    assert decode_session_token(create_session_token(sid)) == sid


def test_session_ids_are_unique():
    assert len({new_session_id() for _ in range(50)}) == 50


def test_tampered_token_is_rejected():
    token = create_session_token("abc")
    forged = jwt.encode({"sid": "abc", "type": "session"}, "other-secret", algorithm="HS256")
    assert decode_session_token(forged) is None
    assert decode_session_token(token[:-2] + "xx") is None
    assert decode_session_token("not-a-token") is None


def test_expired_token_is_rejected():
    assert decode_session_token(create_session_token("abc", expires_minutes=-1)) is None


def test_password_hashing():
    hashed = get_password_hash("secret")
    assert hashed != "secret"
    assert verify_password("secret", hashed)
    assert not verify_password("wrong", hashed)
