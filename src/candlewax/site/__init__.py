"""The candlewax content site: discussion board, blog, game catalogue, profiles.

``create_app()`` wires the substrate for the site and returns an ASGI
app::

    from candlewax.site import create_app

    app = create_app(AppConfig(database_url="sqlite:///site.db", template_dir="views"))

Serve ``app`` with any ASGI server.
"""

from candlewax.app import App
from candlewax.config import AppConfig
from candlewax.data import Database, get_db
from candlewax.http.sessions import SessionStore
from candlewax.injector import Injector
from candlewax.routing.router import Router
from candlewax.site.controllers.index.index import IndexController
from candlewax.site.routes import ROUTES
from candlewax.site.services.mail import LoggingMailer, Mailer
from candlewax.templating.view import TemplateRenderer, View

__all__ = ["ROUTES", "create_app", "create_injector"]

# Default views shipped with the site; files under ``template_dir`` take precedence.
SITE_VIEWS = (("candlewax.site", "views"),)


def create_injector(config: AppConfig, mailer: Mailer) -> Injector:
    """The injector with the site's externally supplied collaborators registered.

    ``Database`` resolves to the database of the request being served.
    """
    injector = Injector()
    injector.register(AppConfig, lambda: config)
    injector.register(Database, get_db)
    injector.register(Mailer, lambda: mailer)
    return injector


def create_app(
    config: AppConfig | None = None,
    *,
    db: Database | None = None,
    mailer: Mailer | None = None,
    sessions: SessionStore | None = None,
    view: TemplateRenderer | None = None,
) -> App:
    """Build the site's ASGI app.

    Anything not supplied is built from ``config``: the database from
    ``database_url``, the view from ``template_dir``, and a
    ``LoggingMailer``. Sessions are only loaded and saved when a
    ``sessions`` store is given.
    """
    config = config or AppConfig()
    db = db or Database(
        config.database_url,
        timeout=config.database_timeout,
        echo=config.database_echo,
    )
    router = Router(
        ROUTES,
        injector=create_injector(config, mailer or LoggingMailer()),
        view=view or View.from_config(config, SITE_VIEWS),
        not_found=(IndexController, "four_zero_four_action"),
        config=config,
    )
    return App(router, db=db, sessions=sessions, config=config)
