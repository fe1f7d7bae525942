"""Tests for candlewax.templating: logical view paths and site filters."""

from datetime import UTC, datetime

import pytest
from kida import DictLoader, Environment

from candlewax.config import AppConfig
from candlewax.context import request_var
from candlewax.http.request import Request
from candlewax.site import SITE_VIEWS
from candlewax.templating import View
from candlewax.templating.filters import field_errors, markdown, pluralize, time_ago


def _view(templates: dict[str, str]) -> View:
    return View(Environment(loader=DictLoader(templates), autoescape=True))


class TestTemplateName:
    @pytest.mark.parametrize(
        ("logical", "expected"),
        [
            ("discussion/post/index", "discussion/post/index.html"),
            ("/Discussion/Post/Index", "discussion/post/index.html"),
            (" index/404 ", "index/404.html"),
            ("index/index.html", "index/index.html"),
        ],
    )
    def test_normalisation(self, logical: str, expected: str) -> None:
        assert _view({}).template_name(logical) == expected

    def test_custom_suffix(self) -> None:
        view = View(Environment(loader=DictLoader({})), suffix=".kida")
        assert view.template_name("index/index") == "index/index.kida"


class TestRender:
    def test_renders_data(self) -> None:
        view = _view({"hello.html": "Hello {{ name }}"})
        assert view.render("/Hello", {"name": "World"}).strip() == "Hello World"

    def test_autoescape(self) -> None:
        view = _view({"hello.html": "{{ name }}"})
        assert "&lt;b&gt;" in view.render("hello", {"name": "<b>"})

    def test_session_is_injected(self) -> None:
        view = _view({"who.html": "{{ session['username'] }}"})
        token = request_var.set(Request("GET", "/", session={"username": "alice"}))
        try:
            assert view.render("who", {}).strip() == "alice"
        finally:
            request_var.reset(token)

    def test_site_filters_are_registered(self, tmp_path) -> None:
        (tmp_path / "count.html").write_text("{{ n | pluralize('reply', 'replies') }}")
        view = View.from_config(AppConfig(template_dir=tmp_path))
        assert view.render("count", {"n": 3}).strip() == "3 replies"

    def test_packaged_views_are_found(self, tmp_path) -> None:
        view = View.from_config(AppConfig(template_dir=tmp_path), SITE_VIEWS)
        assert view.env.get_template("index/404.html") is not None

    def test_template_dir_overrides_packaged_views(self, tmp_path) -> None:
        (tmp_path / "index").mkdir()
        (tmp_path / "index" / "404.html").write_text("custom not found")
        view = View.from_config(AppConfig(template_dir=tmp_path), SITE_VIEWS)
        assert view.render("index/404", {}).strip() == "custom not found"


NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=UTC).timestamp()


class TestTimeAgo:
    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [
            (0.5, "A moment ago"),
            (1, "1 second ago"),
            (59, "59 seconds ago"),
            (60, "1 minute ago"),
            (3 * 3600, "3 hours ago"),
            (86400, "1 day ago"),
            (45 * 86400, "1 month ago"),
            (400 * 86400, "1 year ago"),
        ],
    )
    def test_unix_timestamps(self, seconds: float, expected: str) -> None:
        assert time_ago(NOW - seconds, now=NOW) == expected

    def test_naive_datetime_is_utc(self) -> None:
        assert time_ago(datetime(2024, 2, 29, 12, 0, 0), now=NOW) == "1 day ago"

    def test_iso_string(self) -> None:
        assert time_ago("2024-03-01 10:00:00", now=NOW) == "2 hours ago"

    def test_future_is_a_moment_ago(self) -> None:
        assert time_ago(NOW + 100, now=NOW) == "A moment ago"

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty(self, value: object) -> None:
        assert time_ago(value) == ""


class TestOtherFilters:
    def test_field_errors(self) -> None:
        errors = {"title": ["Required"], "slug": "Taken"}
        assert field_errors(errors, "title") == ["Required"]
        assert field_errors(errors, "slug") == ["Taken"]
        assert field_errors(errors, "content") == []
        assert field_errors(None, "title") == []

    def test_pluralize(self) -> None:
        assert pluralize(1, "reply", "replies") == "1 reply"
        assert pluralize(3, "reply", "replies") == "3 replies"
        assert pluralize(0, "post") == "0 posts"


class TestMarkdown:
    def test_renders_emphasis(self) -> None:
        html = markdown("**bold** and *italic*")
        assert "<strong>bold</strong>" in html
        assert "<em>italic</em>" in html

    def test_renders_paragraphs_and_lists(self) -> None:
        html = markdown("First line\n\n- one\n- two")
        assert "<p>" in html
        assert "<li>" in html

    def test_raw_html_is_shown_as_text(self) -> None:
        html = markdown("Hi <script>alert(1)</script>")
        assert "<script>" not in html
        assert "&lt;script" in html

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty(self, value: object) -> None:
        assert markdown(value) == ""

    def test_output_is_not_escaped_again(self) -> None:
        view = _view({"body.html": "{{ text | markdown }}"})
        view.env.update_filters({"markdown": markdown})
        assert "<strong>bold</strong>" in view.render("body", {"text": "**bold**"})

    def test_blog_index_renders_post_bodies(self, tmp_path) -> None:
        view = View.from_config(AppConfig(template_dir=tmp_path), SITE_VIEWS)
        post = {
            "slug": "hello",
            "title": "Hello",
            "posts_created_at": None,
            "content": "A **bold** <b>claim</b>",
        }
        html = view.render(
            "discussion/blog/index", {"posts": [post], "current_page": 1, "page_count": 1}
        )
        assert "<strong>bold</strong>" in html
        assert "<b>claim</b>" not in html
