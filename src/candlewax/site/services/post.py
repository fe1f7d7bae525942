"""Discussion posts and their reply threads.

Posts and replies share the ``posts`` table: a reply is a post whose
``parent_id`` points at the post it answers. Every read joins the
author's ``users`` and ``user_profiles`` rows, so entities carry
``username``, ``image`` and the ``posts_id`` / ``users_id`` aliases.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from candlewax.data import Database, Entity

POSTS_TABLE = "posts"
AUTHOR_JOINS: dict[str, tuple[str, str]] = {
    "users": ("user_id", "id"),
    "user_profiles": ("user_id", "user_id"),
}
NEWEST_FIRST = "posts.created_at DESC"

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """``"Hello, World!"`` → ``"hello-world"``."""
    return _NON_SLUG.sub("-", text.lower()).strip("-")


@dataclass(frozen=True, slots=True)
class ReplyNode:
    """A reply and the replies to it, newest first."""

    post: Entity
    children: tuple["ReplyNode", ...] = ()


def build_reply_tree(replies: list[Entity], root_id: int) -> tuple[ReplyNode, ...]:
    """Nest a flat list of replies under ``root_id`` by ``parent_id``.

    Sibling order follows the order of ``replies``.
    """
    by_parent: dict[Any, list[Entity]] = {}
    for reply in replies:
        by_parent.setdefault(reply["parent_id"], []).append(reply)

    def branch(parent_id: int, seen: frozenset[int]) -> tuple[ReplyNode, ...]:
        return tuple(
            ReplyNode(reply, branch(reply.id, seen | {reply.id}))
            for reply in by_parent.get(parent_id, ())
            if reply.id not in seen
        )

    return branch(root_id, frozenset({root_id}))


def flatten_replies(
    nodes: tuple[ReplyNode, ...], depth: int = 0
) -> list[tuple[int, Entity]]:
    """Depth-first ``(depth, reply)`` pairs, for rendering a thread as indented rows."""
    rows: list[tuple[int, Entity]] = []
    for node in nodes:
        rows.append((depth, node.post))
        rows.extend(flatten_replies(node.children, depth + 1))
    return rows


class PostService:
    __slots__ = ("_db",)

    def __init__(self, db: Database) -> None:
        self._db = db

    async def create(
        self,
        title: str,
        slug: str,
        content: str,
        is_published: bool,
        user_id: int,
        parent_id: int | None = None,
    ) -> Entity:
        rows = [
            {
                "title": title,
                "slug": slug,
                "content": content,
                "is_published": is_published,
                "user_id": user_id,
                "parent_id": parent_id,
            }
        ]
        return (await self._db.create(POSTS_TABLE, rows))[0]

    async def find(
        self,
        where: Mapping[str, Any],
        comparison: str = "=",
        amount: int | None = None,
        offset: int | None = None,
    ) -> list[Entity]:
        return await self._db.read_left_join(
            POSTS_TABLE,
            AUTHOR_JOINS,
            where,
            NEWEST_FIRST,
            amount,
            offset if amount else None,
            comparison,
        )

    async def find_all(self, amount: int, offset: int) -> list[Entity]:
        """Published top-level posts, newest first."""
        return await self.find({"is_published": True, "parent_id": None}, amount=amount, offset=offset)

    async def get_replies(self, post_id: int, order_by: str | None = NEWEST_FIRST) -> tuple[ReplyNode, ...]:
        """The whole reply thread under ``post_id`` as a tree."""
        replies = await self._db.read_recursive(
            POSTS_TABLE,
            {"parent_id": post_id},
            ("parent_id", "id"),
            AUTHOR_JOINS,
            order_by,
        )
        return build_reply_tree(replies, post_id)

    async def find_root(self, post_id: int) -> Entity | None:
        """The top-level post of the thread ``post_id`` belongs to."""
        return await self._db.find_root(POSTS_TABLE, post_id)

    async def post_count(self, where: Mapping[str, Any] | None = None) -> int:
        return await self._db.count(POSTS_TABLE, where)

    async def unique_slug(self, text: str) -> str:
        """Slugify ``text``, numbering it when the slug is already taken.

        ``"Hello"`` → ``"hello"``, then ``"hello-1"``, ``"hello-2"``...
        """
        slug = slugify(text) or "post"
        similar = await self._db.read(POSTS_TABLE, {"slug": f"{slug}%"}, "LIKE")
        taken = {post["slug"] for post in similar}
        if slug not in taken:
            return slug
        number = len(taken)
        while f"{slug}-{number}" in taken:
            number += 1
        return f"{slug}-{number}"
