"""Tests for candlewax.server.sender response emission rules."""

import pytest

from candlewax.http.cookies import SetCookie
from candlewax.http.response import Response
from candlewax.server.sender import send_response


async def _send(response: Response) -> list[dict]:
    messages: list[dict] = []

    async def send(message: dict) -> None:
        messages.append(message)

    await send_response(response, send)
    return messages


class TestSendResponse:
    @pytest.mark.parametrize("status", [204, 304])
    async def test_no_body_statuses(self, status: int) -> None:
        messages = await _send(Response("unexpected-body").with_status(status))
        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"0"
        assert messages[1]["body"] == b""

    async def test_body_and_length(self) -> None:
        messages = await _send(Response("ok"))
        assert messages[0]["type"] == "http.response.start"
        assert messages[0]["status"] == 200
        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"2"
        assert headers[b"content-type"] == b"text/html; charset=utf-8"
        assert messages[1]["body"] == b"ok"

    async def test_redirect_location_and_cookies(self) -> None:
        response = (
            Response(status=302)
            .with_header("Location", "/user/account/login")
            .with_cookie(SetCookie("candlewax_session", "abc"))
        )
        messages = await _send(response)
        headers = messages[0]["headers"]
        assert (b"location", b"/user/account/login") in headers
        assert any(name == b"set-cookie" and value.startswith(b"candlewax_session=abc") for name, value in headers)
