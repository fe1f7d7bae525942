"""The discussion board: listing, threads, new posts, and replies."""

from collections.abc import Mapping

from candlewax.routing.outcomes import Outcome, Render
from candlewax.site.controllers.base import BaseController, clamp_page, page_count
from candlewax.site.services.post import PostService, flatten_replies
from candlewax.site.services.responder import Responder
from candlewax.validation import integer, required, validate

POSTS_PER_PAGE = 10


class PostController(BaseController):
    def __init__(self, response: Responder, posts: PostService) -> None:
        super().__init__(response)
        self.posts = posts

    async def index_action(self, page_number: int = 1) -> Render:
        total = await self.posts.post_count({"parent_id": None})
        pages = page_count(total, POSTS_PER_PAGE)
        page_number = clamp_page(page_number, pages)
        posts = await self.posts.find_all(POSTS_PER_PAGE, POSTS_PER_PAGE * (page_number - 1))
        return self.response.render(
            "discussion/post/index",
            {
                "posts": posts,
                "page_count": pages,
                "current_page": page_number,
                "logged_in": self.user_id is not None,
            },
        )

    async def view_action(self, slug: str) -> Outcome:
        found = await self.posts.find({"posts.slug": slug})
        if not found:
            return self.response.forward(PostController, "not_found_action", {"slug": slug})
        article = found[0]
        replies = await self.posts.get_replies(article.id)
        return self.response.render(
            "discussion/post/view",
            {"article": article, "replies": replies, "thread": flatten_replies(replies)},
        )

    def create_action(self) -> Outcome:
        return self.require_login() or self.response.render("discussion/post/create")

    async def store_action(self, post: Mapping[str, str] | None = None) -> Outcome:
        if (redirect := self.require_login()) is not None:
            return redirect

        result = validate(
            post or {},
            {
                "title": [required("The post must have a title.")],
                "content": [required("The post must have content.")],
            },
        )
        if not result:
            self.response.flash("errors", result.errors)
            return self.response.redirect("/discussion/post/create")

        slug = await self.posts.unique_slug(result.data["title"])
        await self.posts.create(
            result.data["title"], slug, result.data["content"], True, self.user_id
        )
        return self.response.redirect(f"/p/{slug}")

    async def store_reply_action(self, post: Mapping[str, str] | None = None) -> Outcome:
        if (redirect := self.require_login()) is not None:
            return redirect

        result = validate(
            post or {},
            {
                "parent_id": [required("Missing post to reply to."), integer()],
                "content": [required("You need to type a reply.")],
            },
        )
        root = None
        if "parent_id" not in result.errors:
            root = await self.posts.find_root(int(result.data["parent_id"]))

        if result and root is not None:
            slug = await self.posts.unique_slug(f"{root['title']}-reply")
            await self.posts.create(
                "", slug, result.data["content"], True, self.user_id, int(result.data["parent_id"])
            )

        self.response.flash("errors", result.errors)
        return self.response.redirect(f"/p/{root['slug']}" if root is not None else "/discussion")

    def not_found_action(self, slug: str) -> Render:
        return self.response.render("discussion/post/404", {"slug": slug})
