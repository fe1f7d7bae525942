"""Signed cookie sessions.

Session data is serialized as JSON and signed with ``itsdangerous``;
it is signed, not encrypted, so it must not hold secrets. A tampered or
expired cookie loads as an empty session.

Any object with ``load`` and ``save`` methods can stand in for
``SignedCookieSessions`` (a server-side store, or a fixed dict in
tests).
"""

from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any, Protocol

from itsdangerous import BadSignature, URLSafeTimedSerializer

from candlewax.errors import ConfigurationError
from candlewax.http.cookies import SetCookie
from candlewax.http.request import Request


class SessionStore(Protocol):
    """Loads a request's session and persists it after dispatch."""

    def load(self, request: Request) -> MutableMapping[str, Any]: ...

    def save(self, session: MutableMapping[str, Any]) -> SetCookie | None: ...


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Cookie session settings. ``secret_key`` is required."""

    secret_key: str
    cookie_name: str = "candlewax_session"
    max_age: int = 86400
    secure: bool = False


class SignedCookieSessions:
    """Keeps the whole session in a signed cookie.

    Usage::

        sessions = SignedCookieSessions(SessionConfig(secret_key="..."))
        app = App(router, db, sessions=sessions)
    """

    __slots__ = ("_config", "_serializer")

    def __init__(self, config: SessionConfig) -> None:
        if not config.secret_key:
            msg = "SessionConfig.secret_key must not be empty."
            raise ConfigurationError(msg)
        self._config = config
        self._serializer = URLSafeTimedSerializer(config.secret_key, salt="candlewax.session")

    def load(self, request: Request) -> dict[str, Any]:
        value = request.cookies.get(self._config.cookie_name)
        if not value:
            return {}
        try:
            data = self._serializer.loads(value, max_age=self._config.max_age)
        except BadSignature:
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, session: MutableMapping[str, Any]) -> SetCookie:
        # Always re-signed, so the expiry slides with each request.
        return SetCookie(
            name=self._config.cookie_name,
            value=self._serializer.dumps(dict(session)),
            max_age=self._config.max_age,
            secure=self._config.secure,
        )
