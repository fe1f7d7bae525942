"""Tests for candlewax.App: the ASGI boundary, driven through TestClient."""

import pytest

from candlewax.app import App
from candlewax.config import AppConfig
from candlewax.context import get_request
from candlewax.data import get_db
from candlewax.injector import Injector
from candlewax.routing import Redirect, Render, Router, routes_from
from candlewax.testing import TestClient


class EchoController:
    def form_action(self, post: dict | None = None) -> Render:
        return Render("form", {"post": dict(post or {})})

    def count_action(self) -> Redirect:
        session = get_request().session
        session["visits"] = session.get("visits", 0) + 1
        return Redirect(f"/visits/{session['visits']}")

    def boom_action(self) -> Render:
        raise RuntimeError("kaboom")

    async def db_action(self) -> Render:
        return Render("db", {"connected": get_db().connected})

    def fallback_action(self) -> Render:
        return Render("404")


ROUTES = routes_from(
    {
        "/form": (EchoController, "form_action"),
        "/count": (EchoController, "count_action"),
        "/boom": (EchoController, "boom_action"),
        "/db": (EchoController, "db_action"),
    }
)


def _app(view, *, db=None, sessions=None, debug: bool = False) -> App:
    config = AppConfig(debug=debug)
    router = Router(
        ROUTES,
        injector=Injector(),
        view=view,
        not_found=(EchoController, "fallback_action"),
        config=config,
    )
    return App(router, db=db, sessions=sessions, config=config)


class TestRequests:
    async def test_form_post(self, view) -> None:
        async with TestClient(_app(view)) as client:
            response = await client.post("/form", data={"title": "Hello"})
        assert response.status == 200
        assert view.last == ("form", {"post": {"title": "Hello"}})

    async def test_body_and_content_type(self, view) -> None:
        async with TestClient(_app(view)) as client:
            response = await client.get("/form")
        assert response.text == "form"
        assert response.content_type.startswith("text/html")

    async def test_not_found(self, view) -> None:
        async with TestClient(_app(view)) as client:
            response = await client.get("/nowhere/at/all")
        assert response.status == 404

    async def test_malformed_multipart_is_400(self, view) -> None:
        async with TestClient(_app(view)) as client:
            response = await client.post(
                "/form", body=b"junk", headers={"content-type": "multipart/form-data"}
            )
        assert response.status == 400


class TestErrors:
    async def test_exception_becomes_500(self, view) -> None:
        async with TestClient(_app(view)) as client:
            response = await client.get("/boom")
        assert response.status == 500
        assert response.text == "Internal Server Error"

    async def test_debug_shows_traceback(self, view) -> None:
        async with TestClient(_app(view, debug=True)) as client:
            response = await client.get("/boom")
        assert response.status == 500
        assert "kaboom" in response.text


class TestSessions:
    async def test_session_survives_requests(self, view) -> None:
        from candlewax.http.sessions import SessionConfig, SignedCookieSessions

        sessions = SignedCookieSessions(SessionConfig(secret_key="test"))
        async with TestClient(_app(view, sessions=sessions)) as client:
            first = await client.get("/count")
            second = await client.get("/count")
        assert first.header("location") == "/visits/1"
        assert second.header("location") == "/visits/2"

    async def test_without_store_each_request_is_fresh(self, view) -> None:
        async with TestClient(_app(view)) as client:
            await client.get("/count")
            response = await client.get("/count")
        assert response.header("location") == "/visits/1"


class TestLifespan:
    async def test_database_lifecycle(self, view, tmp_path) -> None:
        from candlewax.data import Database

        db = Database(f"sqlite:///{tmp_path / 'app.db'}")
        app = _app(view, db=db)
        async with TestClient(app) as client:
            assert db.connected
            await client.get("/db")
        assert view.last == ("db", {"connected": True})
        assert not db.connected

    async def test_asgi_lifespan_messages(self, view, tmp_path) -> None:
        from candlewax.data import Database

        db = Database(f"sqlite:///{tmp_path / 'app.db'}")
        app = _app(view, db=db)
        incoming = iter([{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}])
        sent: list[str] = []

        async def receive() -> dict:
            return next(incoming)

        async def send(message: dict) -> None:
            sent.append(message["type"])

        await app({"type": "lifespan"}, receive, send)
        assert sent == ["lifespan.startup.complete", "lifespan.shutdown.complete"]
        assert not db.connected


@pytest.mark.parametrize("path", ["/form", "/form/"])
async def test_trailing_slash(view, path: str) -> None:
    async with TestClient(_app(view)) as client:
        response = await client.get(path)
    assert response.status == 200
