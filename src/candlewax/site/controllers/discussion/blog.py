"""The blog: top-level posts by the site's author."""

from candlewax.routing.outcomes import Render
from candlewax.site.controllers.base import BaseController, clamp_page, page_count
from candlewax.site.services.post import PostService
from candlewax.site.services.responder import Responder

POSTS_PER_PAGE = 9
AUTHOR_ID = 1


class BlogController(BaseController):
    def __init__(self, response: Responder, posts: PostService) -> None:
        super().__init__(response)
        self.posts = posts

    async def index_action(self, page_number: int = 1) -> Render:
        where = {"is_published": True, "posts.user_id": AUTHOR_ID, "parent_id": None}
        total = await self.posts.post_count({"parent_id": None, "user_id": AUTHOR_ID})
        pages = page_count(total, POSTS_PER_PAGE)
        page_number = clamp_page(page_number, pages)
        posts = await self.posts.find(
            where, amount=POSTS_PER_PAGE, offset=POSTS_PER_PAGE * (page_number - 1)
        )
        return self.response.render(
            "discussion/blog/index",
            {
                "posts": posts,
                "page_count": pages,
                "current_page": page_number,
            },
        )
