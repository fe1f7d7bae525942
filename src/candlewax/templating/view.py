"""The template service: logical view paths rendered through kida.

Controllers name views by logical path (``"Discussion/Post/Index"``);
``View`` maps that to a template file and injects the current session
so every template can read login state and flash data.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from kida import ChoiceLoader, Environment, FileSystemLoader, PackageLoader

from candlewax.config import AppConfig
from candlewax.context import request_var
from candlewax.templating.filters import SITE_FILTERS


class TemplateRenderer(Protocol):
    """Anything the router can hand a view path and data to."""

    def render(self, view: str, data: Mapping[str, Any]) -> str: ...


def create_environment(
    config: AppConfig,
    packages: Sequence[tuple[str, str]] = (),
) -> Environment:
    """Create the kida Environment for ``config.template_dir``.

    ``packages`` are ``(package, directory)`` pairs searched after the
    template directory, so a site can ship default views that a
    deployment overrides file by file.
    """
    loaders = [FileSystemLoader(str(config.template_dir))]
    loaders.extend(PackageLoader(package, directory) for package, directory in packages)
    env = Environment(
        loader=ChoiceLoader(loaders),
        autoescape=config.autoescape,
        auto_reload=config.debug,
    )
    env.update_filters(SITE_FILTERS)
    return env


class View:
    """Renders logical view paths with a kida Environment.

    Usage::

        view = View(create_environment(config), suffix=config.template_suffix)
        html = view.render("discussion/post/view", {"post": post})
    """

    __slots__ = ("_env", "_suffix")

    def __init__(self, env: Environment, *, suffix: str = ".html") -> None:
        self._env = env
        self._suffix = suffix

    @classmethod
    def from_config(cls, config: AppConfig, packages: Sequence[tuple[str, str]] = ()) -> "View":
        return cls(create_environment(config, packages), suffix=config.template_suffix)

    @property
    def env(self) -> Environment:
        return self._env

    def template_name(self, view: str) -> str:
        """Map a logical view path to its template file name.

        ``"/Discussion/Post/Index"`` → ``"discussion/post/index.html"``
        """
        name = view.strip().lstrip("/").lower()
        if not name.endswith(self._suffix):
            name += self._suffix
        return name

    def render(self, view: str, data: Mapping[str, Any]) -> str:
        context = dict(data)
        request = request_var.get(None)
        context["session"] = dict(request.session) if request is not None else {}
        return self._env.get_template(self.template_name(view)).render(context)
