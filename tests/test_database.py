"""Tests for candlewax.data.Database: entity operations against SQLite."""

import sqlite3

import pytest

from candlewax.data import (
    AlreadyConnected,
    Database,
    DataError,
    InvalidOperation,
    NotConnected,
    QueryError,
    StoreUnavailable,
)
from candlewax.data.database import _translate


async def _thread(db: Database) -> list[int]:
    """A post with a two-level reply chain and a sibling reply: ids [root, a, b, c]."""
    [root] = await db.create("posts", [{"title": "Root", "slug": "root", "content": "r", "parent_id": None}])
    [a, b] = await db.create(
        "posts",
        [
            {"title": "", "slug": "a", "content": "a", "parent_id": root.id},
            {"title": "", "slug": "b", "content": "b", "parent_id": root.id},
        ],
    )
    [c] = await db.create("posts", [{"title": "", "slug": "c", "content": "c", "parent_id": a.id}])
    return [root.id, a.id, b.id, c.id]


class TestLifecycle:
    async def test_operations_before_connect(self, tmp_path) -> None:
        db = Database(f"sqlite:///{tmp_path / 'x.db'}")
        with pytest.raises(NotConnected):
            await db.read("posts")

    async def test_double_connect(self, db) -> None:
        with pytest.raises(AlreadyConnected):
            await db.connect()

    async def test_disconnect_is_idempotent(self, db) -> None:
        await db.disconnect()
        await db.disconnect()
        assert not db.connected

    async def test_async_context_manager(self, tmp_path) -> None:
        async with Database(f"sqlite:///{tmp_path / 'x.db'}") as db:
            assert db.connected
        assert not db.connected

    def test_unsupported_url(self) -> None:
        with pytest.raises(DataError, match="Unsupported database URL"):
            Database("mysql://localhost/site")


class TestCreate:
    async def test_returns_entities_with_ids(self, db) -> None:
        posts = await db.create(
            "posts",
            [
                {"title": "One", "slug": "one", "content": "1"},
                {"title": "Two", "slug": "two", "content": "2"},
            ],
        )
        assert [p.id for p in posts] == [1, 2]
        assert posts[1]["title"] == "Two"
        assert posts[0].table == "posts"

    async def test_entity_carries_only_given_columns(self, db) -> None:
        [post] = await db.create("posts", [{"title": "One", "slug": "one", "content": "1"}])
        assert set(post) == {"title", "slug", "content"}

    async def test_unknown_table(self, db) -> None:
        with pytest.raises(QueryError):
            await db.create("nowhere", [{"title": "x"}])


class TestRead:
    async def test_where_none_is_null(self, db) -> None:
        ids = await _thread(db)
        roots = await db.read("posts", {"parent_id": None})
        assert [p.id for p in roots] == [ids[0]]

    async def test_read_all(self, db) -> None:
        await _thread(db)
        assert len(await db.read("posts")) == 4

    async def test_like(self, db) -> None:
        await db.create(
            "posts",
            [
                {"title": "", "slug": "hello", "content": ""},
                {"title": "", "slug": "hello-1", "content": ""},
                {"title": "", "slug": "goodbye", "content": ""},
            ],
        )
        found = await db.read("posts", {"slug": "hello%"}, "LIKE")
        assert sorted(p["slug"] for p in found) == ["hello", "hello-1"]

    async def test_rows_have_store_defaults(self, db) -> None:
        await db.create("posts", [{"title": "", "slug": "x", "content": ""}])
        [post] = await db.read("posts", {"slug": "x"})
        assert post["created_at"]
        assert post["is_published"] == 1

    async def test_create_then_read_round_trip(self, db) -> None:
        row = {"title": "Round trip", "slug": "round-trip", "content": "Body", "parent_id": None}
        [created] = await db.create("posts", [row])
        [found] = await db.read("posts", {"slug": "round-trip"})
        assert found.id == created.id
        assert found.table == "posts"
        columns = found.get_columns()
        assert {key: columns[key] for key in row} == row


class TestLeftJoin:
    async def test_joined_columns_and_aliases(self, db) -> None:
        [user] = await db.create("users", [{"username": "alice", "email": "a@x.io", "password": "-"}])
        await db.create("posts", [{"title": "Hi", "slug": "hi", "content": "", "user_id": user.id}])
        [post] = await db.read_left_join("posts", {"users": ("user_id", "id")})
        assert post["username"] == "alice"
        assert post["users_id"] == user.id
        assert post["posts_id"] == post.id
        assert "posts_created_at" in post

    async def test_primary_id_wins(self, db) -> None:
        await db.create("users", [{"username": "a", "email": "a", "password": "-"}] * 3)
        [post] = await db.create("posts", [{"title": "", "slug": "p", "content": "", "user_id": 2}])
        [found] = await db.read_left_join("posts", {"users": ("user_id", "id")})
        assert found.id == post.id
        assert found["users_id"] == 2

    async def test_missing_join_row_is_null(self, db) -> None:
        await db.create("posts", [{"title": "", "slug": "p", "content": "", "user_id": 99}])
        [post] = await db.read_left_join("posts", {"users": ("user_id", "id")})
        assert post["username"] is None

    async def test_limit_and_offset(self, db) -> None:
        await db.create("posts", [{"title": str(i), "slug": str(i), "content": ""} for i in range(5)])
        page = await db.read_left_join(
            "posts", {"users": ("user_id", "id")}, None, "posts.id ASC", 2, 2
        )
        assert [p["title"] for p in page] == ["2", "3"]


class TestRecursive:
    async def test_descendant_closure(self, db) -> None:
        root, a, b, c = await _thread(db)
        replies = await db.read_recursive("posts", {"parent_id": root}, ("parent_id", "id"))
        assert sorted(p.id for p in replies) == [a, b, c]

    async def test_from_a_leaf_is_empty(self, db) -> None:
        *_, c = await _thread(db)
        assert await db.read_recursive("posts", {"parent_id": c}, ("parent_id", "id")) == []

    async def test_cyclic_chain_terminates(self, db) -> None:
        [x, y] = await db.create(
            "posts",
            [{"title": "", "slug": "x", "content": ""}, {"title": "", "slug": "y", "content": ""}],
        )
        await db.execute("UPDATE posts SET parent_id = ? WHERE id = ?", y.id, x.id)
        await db.execute("UPDATE posts SET parent_id = ? WHERE id = ?", x.id, y.id)
        found = await db.read_recursive("posts", {"parent_id": x.id}, ("parent_id", "id"))
        assert sorted(p.id for p in found) == [x.id, y.id]

    async def test_find_root(self, db) -> None:
        root, _, _, c = await _thread(db)
        found = await db.find_root("posts", c)
        assert found is not None
        assert found.id == root
        assert found["slug"] == "root"

    async def test_find_root_of_missing_row(self, db) -> None:
        assert await db.find_root("posts", 404) is None


class TestUpdateDeleteCount:
    async def test_update_persists_every_column(self, db) -> None:
        await db.create("posts", [{"title": "Old", "slug": "old", "content": ""}])
        [post] = await db.read("posts", {"slug": "old"})
        post.set_column("title", "New")
        await db.update([post])
        [again] = await db.read("posts", {"id": post.id})
        assert again["title"] == "New"

    async def test_update_with_own_columns_is_idempotent(self, db) -> None:
        await _thread(db)
        [post] = await db.read("posts", {"slug": "a"})
        before = post.get_columns()
        await db.update([post])
        await db.update([post])
        [again] = await db.read("posts", {"id": post.id})
        assert again.get_columns() == before
        assert await db.count("posts") == 4

    async def test_delete_returns_rows_removed(self, db) -> None:
        await _thread(db)
        assert await db.delete("posts", {"content": "a"}) == 1
        assert await db.delete("posts", {"content": "a"}) == 0

    async def test_delete_requires_where(self, db) -> None:
        with pytest.raises(InvalidOperation):
            await db.delete("posts", {})

    async def test_count(self, db) -> None:
        root, *_ = await _thread(db)
        assert await db.count("posts") == 4
        assert await db.count("posts", {"parent_id": root}) == 2
        assert await db.count("posts", {"parent_id": None}) == 1


class TestTransaction:
    async def test_commit(self, db) -> None:
        async with db.transaction():
            await db.create("users", [{"username": "a", "email": "a", "password": "-"}])
        assert await db.count("users") == 1

    async def test_rollback_on_error(self, db) -> None:
        with pytest.raises(RuntimeError):
            async with db.transaction():
                await db.create("users", [{"username": "a", "email": "a", "password": "-"}])
                raise RuntimeError("boom")
        assert await db.count("users") == 0

    async def test_nested_joins_outer(self, db) -> None:
        with pytest.raises(RuntimeError):
            async with db.transaction():
                async with db.transaction():
                    await db.create("users", [{"username": "a", "email": "a", "password": "-"}])
                raise RuntimeError("boom")
        assert await db.count("users") == 0

    async def test_transaction_belongs_to_its_database(self, db, tmp_path) -> None:
        async with Database(f"sqlite:///{tmp_path / 'other.db'}") as other:
            await other.execute_script("CREATE TABLE notes (id INTEGER PRIMARY KEY, body TEXT)")
            with pytest.raises(RuntimeError):
                async with db.transaction():
                    await db.create("users", [{"username": "a", "email": "a", "password": "-"}])
                    await other.create("notes", [{"body": "kept"}])
                    raise RuntimeError("boom")
            assert await db.count("users") == 0
            assert await other.count("notes") == 1


class TestRawSQL:
    async def test_fetch_rows(self, db) -> None:
        await db.execute("INSERT INTO games (title, slug) VALUES (?, ?)", "Space Race", "space-race")
        rows = await db.fetch_rows("SELECT title FROM games WHERE slug = ?", "space-race")
        assert rows == [{"title": "Space Race"}]


class TestStoreUnavailable:
    async def test_locked_database(self, tmp_path) -> None:
        path = tmp_path / "locked.db"
        async with Database(f"sqlite:///{path}", timeout=0.2) as db:
            await db.execute_script("CREATE TABLE notes (id INTEGER PRIMARY KEY, body TEXT)")
            holder = sqlite3.connect(path, isolation_level=None)
            try:
                holder.execute("BEGIN EXCLUSIVE")
                with pytest.raises(StoreUnavailable):
                    await db.create("notes", [{"body": "blocked"}])
            finally:
                holder.execute("ROLLBACK")
                holder.close()

    @pytest.mark.parametrize(
        "exc",
        [
            TimeoutError(),
            ConnectionRefusedError("refused"),
            sqlite3.OperationalError("database is locked"),
            sqlite3.ProgrammingError("Cannot operate on a closed database."),
        ],
    )
    def test_unavailable_errors(self, exc: Exception) -> None:
        assert isinstance(_translate(exc), StoreUnavailable)

    @pytest.mark.parametrize(
        "exc",
        [
            sqlite3.IntegrityError("NOT NULL constraint failed"),
            sqlite3.OperationalError("no such table: nowhere"),
        ],
    )
    def test_other_errors_are_query_errors(self, exc: Exception) -> None:
        assert isinstance(_translate(exc), QueryError)
