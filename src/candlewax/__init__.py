"""Candlewax: a small MVC runtime for a self-hosted content site.

Controllers are plain classes whose constructors declare their
services; the injector builds them per request. Actions declare what
they need from the URL and the request, and return one of three
outcomes::

    from candlewax import Redirect, Render

    class PostController(BaseController):
        async def view_action(self, slug: str) -> Render:
            ...
            return Render("discussion/post/view", {"article": article})

Data access::

    from candlewax.data import Database
    db = Database("sqlite:///site.db")
    posts = await db.read("posts", {"parent_id": None})
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "CandlewaxError",
    "ConfigurationError",
    "Forward",
    "Injector",
    "Redirect",
    "Render",
    "Request",
    "Response",
    "Router",
    "get_request",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import candlewax`` fast while providing a clean top-level API.
    """
    if name == "App":
        from candlewax.app import App

        return App

    if name == "AppConfig":
        from candlewax.config import AppConfig

        return AppConfig

    if name == "Injector":
        from candlewax.injector import Injector

        return Injector

    if name == "Router":
        from candlewax.routing.router import Router

        return Router

    if name in ("Request", "Response"):
        from candlewax import http as _http

        return getattr(_http, name)

    if name in ("Render", "Redirect", "Forward"):
        from candlewax.routing import outcomes as _outcomes

        return getattr(_outcomes, name)

    if name == "get_request":
        from candlewax.context import get_request

        return get_request

    if name in ("CandlewaxError", "ConfigurationError"):
        from candlewax import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
