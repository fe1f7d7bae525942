"""The home page and the site-wide not-found page."""

from candlewax.routing.outcomes import Render
from candlewax.site.controllers.base import BaseController


class IndexController(BaseController):
    def index_action(self) -> Render:
        return self.response.render("index/index")

    def four_zero_four_action(self) -> Render:
        return self.response.render("index/404")
