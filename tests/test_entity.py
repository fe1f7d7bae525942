"""Tests for candlewax.data.Entity: fixed column sets, mutable values."""

import pytest

from candlewax.data import Entity, UnknownColumn


def _post() -> Entity:
    return Entity("posts", 7, {"title": "Hello", "slug": "hello", "parent_id": None})


class TestIdentity:
    def test_table_and_id(self) -> None:
        post = _post()
        assert post.table == "posts"
        assert post.id == 7

    def test_id_is_coerced_to_int(self) -> None:
        assert Entity("posts", "12", {}).id == 12

    def test_equality_compares_table_id_and_columns(self) -> None:
        assert _post() == _post()
        assert _post() != Entity("users", 7, {"title": "Hello", "slug": "hello", "parent_id": None})
        changed = _post()
        changed.set_column("title", "Bye")
        assert changed != _post()


class TestColumns:
    def test_read_by_key(self) -> None:
        post = _post()
        assert post["title"] == "Hello"
        assert post["parent_id"] is None

    def test_unknown_column_read(self) -> None:
        with pytest.raises(UnknownColumn, match="votes"):
            _post()["votes"]

    def test_unknown_column_is_a_key_error(self) -> None:
        assert _post().get("votes") is None
        assert "votes" not in _post()

    def test_set_existing_column(self) -> None:
        post = _post()
        post.set_column("title", "Hello again")
        assert post["title"] == "Hello again"

    def test_set_unknown_column_is_refused(self) -> None:
        post = _post()
        with pytest.raises(UnknownColumn) as info:
            post.set_column("votes", 3)
        assert info.value.table == "posts"
        assert info.value.column == "votes"
        assert "votes" not in post

    def test_get_columns_is_a_copy(self) -> None:
        post = _post()
        columns = post.get_columns()
        columns["title"] = "Mutated"
        assert post["title"] == "Hello"

    def test_columns_view_is_read_only(self) -> None:
        post = _post()
        with pytest.raises(TypeError):
            post.columns["title"] = "Nope"  # type: ignore[index]

    def test_column_order_is_kept(self) -> None:
        assert list(_post()) == ["title", "slug", "parent_id"]
        assert len(_post()) == 3
