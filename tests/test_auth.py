import pytest

from clipforge.auth import SESSION_TOKEN_TYPE, create_session_token, decode_session_token


def test_session_token_round_trip():
    issued = create_session_token("user-42")

    payload = decode_session_token(issued["token"])

    assert payload["sub"] == "user-42"
    assert payload["type"] == SESSION_TOKEN_TYPE
    assert payload["exp"] == issued["expires_at"]


def test_tampered_token_rejected():
    token = create_session_token("user-42")["token"]

    with pytest.raises(ValueError):
        decode_session_token(token[:-2] + ("aa" if not token.endswith("aa") else "bb"))


def test_garbage_token_rejected():
    with pytest.raises(ValueError):
        decode_session_token("not-a-token")
