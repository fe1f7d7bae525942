"""Tests for candlewax.http: headers, cookies, requests, responses, forms."""

import pytest

from candlewax.http import FormData, Request, Response
from candlewax.http.cookies import SetCookie, parse_cookies
from candlewax.http.forms import parse_form_data
from candlewax.http.headers import Headers

BOUNDARY = "candlewaxboundary"
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def multipart_body(fields: dict[str, str], files: dict[str, tuple[str, str, bytes]]) -> bytes:
    parts: list[bytes] = []
    for name, value in fields.items():
        parts.append(
            f'--{BOUNDARY}\r\nContent-Disposition: form-data; name="{name}"\r\n\r\n'.encode()
            + value.encode()
            + b"\r\n"
        )
    for name, (filename, content_type, content) in files.items():
        parts.append(
            (
                f"--{BOUNDARY}\r\n"
                f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
                f"Content-Type: {content_type}\r\n\r\n"
            ).encode()
            + content
            + b"\r\n"
        )
    parts.append(f"--{BOUNDARY}--\r\n".encode())
    return b"".join(parts)


class TestHeaders:
    def test_case_insensitive(self) -> None:
        headers = Headers.from_pairs({"Content-Type": "text/html"})
        assert headers["content-type"] == "text/html"
        assert "CONTENT-TYPE" in headers

    def test_repeated_values(self) -> None:
        headers = Headers(((b"accept", b"a"), (b"Accept", b"b")))
        assert headers["accept"] == "a"
        assert headers.get_list("accept") == ["a", "b"]
        assert len(headers) == 1

    def test_missing(self) -> None:
        assert Headers().get("cookie") is None


class TestCookies:
    def test_parse(self) -> None:
        assert parse_cookies("a=1; b = two ;broken") == {"a": "1", "b": "two"}
        assert parse_cookies("") == {}

    def test_set_cookie_header(self) -> None:
        cookie = SetCookie("sid", "abc", max_age=60, secure=True)
        assert cookie.header_value() == "sid=abc; Path=/; HttpOnly; SameSite=Lax; Max-Age=60; Secure"

    def test_session_length_cookie(self) -> None:
        assert SetCookie("sid", "abc").header_value() == "sid=abc; Path=/; HttpOnly; SameSite=Lax"

    def test_request_cookies(self) -> None:
        request = Request("GET", "/", headers=Headers.from_pairs({"Cookie": "sid=abc"}))
        assert request.cookies == {"sid": "abc"}


class TestRequest:
    def test_url_includes_query_string(self) -> None:
        assert Request("GET", "/discussion", query_string="x=1").url == "/discussion?x=1"
        assert Request("GET", "/discussion").url == "/discussion"

    def test_session_defaults_to_fresh_dict(self) -> None:
        first, second = Request("GET", "/"), Request("GET", "/")
        first.session["user_id"] = 1
        assert second.session == {}


class TestResponse:
    def test_chaining_returns_new_objects(self) -> None:
        base = Response("hi")
        redirected = base.with_status(302).with_header("Location", "/login")
        assert base.status == 200
        assert redirected.status == 302
        assert redirected.header("location") == "/login"

    def test_body_bytes_and_text(self) -> None:
        assert Response("é").body_bytes == "é".encode()
        assert Response(b"raw").text == "raw"

    def test_cookies(self) -> None:
        response = Response().with_cookie(SetCookie("a", "1"))
        assert response.cookies[0].name == "a"


class TestFormData:
    def test_first_value_and_list(self) -> None:
        form = FormData({"tag": ["a", "b"]})
        assert form["tag"] == "a"
        assert form.get_list("tag") == ["a", "b"]
        assert form.get_list("missing") == []

    def test_from_fields(self) -> None:
        form = FormData.from_fields({"title": "Hello"})
        assert dict(form) == {"title": "Hello"}
        assert form.files == {}

    def test_empty_is_falsy(self) -> None:
        assert not FormData()


class TestParseFormData:
    def test_urlencoded(self) -> None:
        form = parse_form_data(b"title=Hello+World&content=&tag=a&tag=b", "application/x-www-form-urlencoded")
        assert form["title"] == "Hello World"
        assert form["content"] == ""
        assert form.get_list("tag") == ["a", "b"]

    def test_other_content_types_are_empty(self) -> None:
        assert len(parse_form_data(b'{"a": 1}', "application/json")) == 0
        assert len(parse_form_data(b"", "")) == 0

    def test_multipart_fields_and_files(self) -> None:
        body = multipart_body({"bio": "Hello there"}, {"image": ("me.png", "image/png", PNG)})
        form = parse_form_data(body, f"multipart/form-data; boundary={BOUNDARY}")
        assert form["bio"] == "Hello there"
        upload = form.files["image"]
        assert upload.filename == "me.png"
        assert upload.content_type == "image/png"
        assert upload.size == len(PNG)

    async def test_upload_read_and_save(self, tmp_path) -> None:
        body = multipart_body({}, {"image": ("me.png", "image/png", PNG)})
        upload = parse_form_data(body, f"multipart/form-data; boundary={BOUNDARY}").files["image"]
        assert await upload.read() == PNG
        await upload.save(tmp_path / "me.png")
        assert (tmp_path / "me.png").read_bytes() == PNG

    def test_multipart_without_boundary(self) -> None:
        with pytest.raises(ValueError, match="boundary"):
            parse_form_data(b"", "multipart/form-data")
