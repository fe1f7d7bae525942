"""The site's explicit route table, tried in order after convention lookup."""

from candlewax.routing.route import RouteDescriptor
from candlewax.routing.router import routes_from
from candlewax.site.controllers.discussion.blog import BlogController
from candlewax.site.controllers.discussion.post import PostController
from candlewax.site.controllers.games.catalogue import CatalogueController
from candlewax.site.controllers.user.profile import ProfileController

ROUTES: tuple[RouteDescriptor, ...] = routes_from(
    {
        "/u/{username}": (ProfileController, "index_action"),
        "/p/{slug}": (PostController, "view_action"),
        "/discussion": (PostController, "index_action"),
        "/discussion/{page_number}": (PostController, "index_action"),
        "/blog": (BlogController, "index_action"),
        "/blog/{page_number}": (BlogController, "index_action"),
        "/games": (CatalogueController, "index_action"),
        "/games/{slug}": (CatalogueController, "view_action"),
    }
)
