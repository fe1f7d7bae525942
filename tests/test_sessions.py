"""Tests for candlewax.http.sessions: signed cookie sessions."""

import pytest

from candlewax.errors import ConfigurationError
from candlewax.http.headers import Headers
from candlewax.http.request import Request
from candlewax.http.sessions import SessionConfig, SignedCookieSessions


def _request_with(cookie: str) -> Request:
    return Request("GET", "/", headers=Headers.from_pairs({"cookie": cookie}))


class TestSignedCookieSessions:
    def test_round_trip(self) -> None:
        sessions = SignedCookieSessions(SessionConfig(secret_key="s3cret"))
        cookie = sessions.save({"user_id": 1, "username": "alice"})
        assert cookie.name == "candlewax_session"
        assert cookie.max_age == 86400
        loaded = sessions.load(_request_with(f"{cookie.name}={cookie.value}"))
        assert loaded == {"user_id": 1, "username": "alice"}

    def test_no_cookie_is_empty(self) -> None:
        sessions = SignedCookieSessions(SessionConfig(secret_key="s3cret"))
        assert sessions.load(Request("GET", "/")) == {}

    def test_tampered_cookie_is_empty(self) -> None:
        sessions = SignedCookieSessions(SessionConfig(secret_key="s3cret"))
        cookie = sessions.save({"user_id": 1})
        assert sessions.load(_request_with(f"{cookie.name}={cookie.value}x")) == {}

    def test_other_secret_is_rejected(self) -> None:
        ours = SignedCookieSessions(SessionConfig(secret_key="ours"))
        theirs = SignedCookieSessions(SessionConfig(secret_key="theirs"))
        cookie = theirs.save({"user_id": 1})
        assert ours.load(_request_with(f"{cookie.name}={cookie.value}")) == {}

    def test_expired_cookie_is_empty(self) -> None:
        sessions = SignedCookieSessions(SessionConfig(secret_key="s3cret", max_age=-1))
        cookie = sessions.save({"user_id": 1})
        assert sessions.load(_request_with(f"{cookie.name}={cookie.value}")) == {}

    def test_secret_is_required(self) -> None:
        with pytest.raises(ConfigurationError):
            SignedCookieSessions(SessionConfig(secret_key=""))
