"""Render, Redirect, and Forward outcome types.

Frozen dataclasses that controller actions return. The router inspects
them to render a view, emit a ``Location`` header, or re-dispatch to
another action without changing the visible URL.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Render:
    """Render a view through the template service.

    Usage::

        return Render("discussion/post/index", {"posts": posts})
    """

    view: str
    data: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Redirect:
    """Redirect the client to another URL (``302`` with ``Location``).

    Usage::

        return Redirect("/user/account/login")
    """

    url: str


@dataclass(frozen=True, slots=True)
class Forward:
    """Dispatch internally to another controller action.

    The URL is not re-routed: the router constructs ``controller``,
    binds ``params`` to ``action``, and interprets its outcome in turn.

    Usage::

        return Forward(PostController, "not_found_action", {"slug": slug})
    """

    controller: type
    action: str
    params: Mapping[str, Any] = field(default_factory=dict)


type Outcome = Render | Redirect | Forward
