"""Builds dispatch outcomes and carries flash data across redirects.

Flash data lives in ``session["flash"]`` as ``{key: messages}``. The
next ``render()`` merges it into the view data and clears it, so a
message flashed before a redirect shows up exactly once. Submitted
form fields ride along the same way, so a form re-rendered after a
failed submission can be re-populated from ``post``.
"""

from collections.abc import Mapping, MutableMapping
from typing import Any

from candlewax.context import get_request
from candlewax.routing.outcomes import Forward, Redirect, Render

FLASH_KEY = "flash"


class Responder:
    """Outcome factory for controller actions.

    Usage::

        self.response.flash("errors", result.errors)
        return self.response.redirect("/discussion/post/create")
    """

    __slots__ = ()

    @property
    def session(self) -> MutableMapping[str, Any]:
        """The current request's session."""
        return get_request().session

    @property
    def form(self) -> Mapping[str, str]:
        return get_request().form

    def render(self, view: str, data: Mapping[str, Any] | None = None) -> Render:
        merged = dict(data or {})
        flashed = self.session.pop(FLASH_KEY, None)
        if flashed:
            merged.update(flashed)
        if self.form:
            merged["post"] = dict(self.form)
        return Render(view, merged)

    def redirect(self, url: str) -> Redirect:
        if self.form:
            self.flash("post", dict(self.form))
        return Redirect(url)

    def forward(self, controller: type, action: str, params: Mapping[str, Any] | None = None) -> Forward:
        return Forward(controller, action, dict(params or {}))

    def flash(self, key: str, messages: Any) -> None:
        """Store ``messages`` for the next render under ``key``."""
        flashed = dict(self.session.get(FLASH_KEY) or {})
        flashed[key] = messages
        self.session[FLASH_KEY] = flashed
