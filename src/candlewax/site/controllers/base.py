"""Shared controller plumbing."""

from candlewax.routing.outcomes import Redirect
from candlewax.site.services.responder import Responder

LOGIN_URL = "/user/account/login"


class BaseController:
    """Base class for all site controllers.

    Subclasses take the ``Responder`` first and pass it up::

        class BlogController(BaseController):
            def __init__(self, response: Responder, posts: PostService) -> None:
                super().__init__(response)
                self.posts = posts
    """

    def __init__(self, response: Responder) -> None:
        self.response = response

    @property
    def user_id(self) -> int | None:
        """The logged-in user's id, or None."""
        return self.response.session.get("user_id")

    def require_login(self) -> Redirect | None:
        """A redirect to the login page when nobody is logged in."""
        if self.user_id is None:
            return Redirect(LOGIN_URL)
        return None


def page_count(total: int, per_page: int) -> int:
    """Number of pages needed for ``total`` items, at least 1."""
    return max(1, -(-total // per_page))


def clamp_page(page_number: int, pages: int) -> int:
    """Bring a requested page number into ``1..pages``."""
    return min(max(page_number, 1), pages)
