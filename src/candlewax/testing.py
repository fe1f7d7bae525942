"""Test client for candlewax applications.

Drives an ``App`` through its ASGI interface directly, no sockets
involved, and returns the same ``Response`` type used in production.
Cookies set by the app are kept and sent back, so a signed session
survives across requests like it would in a browser.
"""

from typing import Any
from urllib.parse import urlencode

from candlewax.app import App
from candlewax.http.cookies import parse_cookies
from candlewax.http.response import Response


class TestClient:
    """Async test client for candlewax applications.

    Usage::

        async with TestClient(app) as client:
            response = await client.get("/discussion")
            assert response.status == 200
    """

    __test__ = False  # not a pytest test class
    __slots__ = ("app", "cookies")

    def __init__(self, app: App) -> None:
        self.app = app
        self.cookies: dict[str, str] = {}

    async def __aenter__(self) -> "TestClient":
        await self.app.startup()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.app.shutdown()

    async def get(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        return await self.request("GET", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        data: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Response:
        """Send a POST request; ``data`` is sent URL-encoded."""
        merged = dict(headers or {})
        if data is not None:
            body = urlencode(data).encode("utf-8")
            merged.setdefault("content-type", "application/x-www-form-urlencoded")
        return await self.request("POST", path, headers=merged, body=body)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> Response:
        """Send an arbitrary request through the ASGI app."""
        path_part, _, query_string = path.partition("?")

        raw_headers = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in (headers or {}).items()
        ]
        if self.cookies:
            jar = "; ".join(f"{k}={v}" for k, v in self.cookies.items())
            raw_headers.append((b"cookie", jar.encode("latin-1")))

        scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method.upper(),
            "path": path_part,
            "raw_path": path_part.encode("latin-1"),
            "query_string": query_string.encode("latin-1"),
            "root_path": "",
            "headers": raw_headers,
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 0),
        }

        body_sent = False

        async def receive() -> dict[str, Any]:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": body or b"", "more_body": False}
            return {"type": "http.disconnect"}

        status = 200
        response_headers: list[tuple[bytes, bytes]] = []
        body_parts: list[bytes] = []

        async def send(message: dict[str, Any]) -> None:
            nonlocal status, response_headers
            if message["type"] == "http.response.start":
                status = message["status"]
                response_headers = list(message.get("headers", []))
            elif message["type"] == "http.response.body":
                body_parts.append(message.get("body", b""))

        await self.app(scope, receive, send)

        content_type = "text/html; charset=utf-8"
        extra: list[tuple[str, str]] = []
        for name_b, value_b in response_headers:
            name, value = name_b.decode("latin-1"), value_b.decode("latin-1")
            if name == "content-type":
                content_type = value
            elif name == "set-cookie":
                self._store_cookie(value)
                extra.append((name, value))
            elif name != "content-length":
                extra.append((name, value))

        return Response(
            body=b"".join(body_parts),
            status=status,
            content_type=content_type,
            headers=tuple(extra),
        )

    def _store_cookie(self, header: str) -> None:
        pair, _, attributes = header.partition(";")
        for name, value in parse_cookies(pair).items():
            if "max-age=0" in attributes.lower().replace(" ", ""):
                self.cookies.pop(name, None)
            else:
                self.cookies[name] = value
