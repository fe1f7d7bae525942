"""Two-stage URL router: convention lookup, then the explicit route table.

Lookup order for a request path:

1. **Convention**: ``/module/controller/action/arg/...`` names a
   controller class by position. ``/discussion/post/view/hello`` imports
   ``<controllers_package>.discussion.post``, takes its
   ``PostController``, and binds ``["hello"]`` to ``view_action``.
   Missing segments default to the configured default module,
   ``index``, and ``index``.
2. **Route table**: descriptors are tried in declaration order; the
   first whose template matches and whose action accepts the captured
   values wins.
3. **Not found**: the configured fallback action, rendered with a 404.

A stage that cannot produce a bound target raises ``RouteNotFound``
internally and the next stage is tried; the error never escapes.
"""

import importlib
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from candlewax._internal.invoke import invoke
from candlewax.config import AppConfig
from candlewax.context import request_var
from candlewax.errors import (
    ForwardLoopDetected,
    RouteNotFound,
    RoutingError,
    UnresolvableParameter,
)
from candlewax.http.request import Request
from candlewax.http.response import Response
from candlewax.injector import Injector
from candlewax.routing.outcomes import Forward, Redirect, Render
from candlewax.routing.params import ParamResolver, type_cast_from_string
from candlewax.routing.route import DispatchTarget, RouteDescriptor, RouteValues, split_path
from candlewax.templating.view import TemplateRenderer

logger = logging.getLogger("candlewax.routing")


def segment_name(segment: str) -> str:
    """Normalise a URL segment to a Python name: ``Four-Zero-Four`` → ``four_zero_four``."""
    return segment.lower().replace("-", "_")


def controller_class_name(name: str) -> str:
    """``post`` → ``PostController``; ``four_zero_four`` → ``FourZeroFourController``."""
    return "".join(part.capitalize() for part in name.split("_")) + "Controller"


def action_method_name(name: str) -> str:
    return f"{name}_action"


class Router:
    """Resolves request paths to controller actions and runs them.

    Usage::

        router = Router(
            ROUTES,
            injector=injector,
            view=view,
            not_found=(IndexController, "four_zero_four_action"),
            config=config,
        )
        response = await router.handle_request(request)
    """

    __slots__ = ("_config", "_injector", "_not_found", "_resolver", "_routes", "_view")

    def __init__(
        self,
        routes: Sequence[RouteDescriptor],
        *,
        injector: Injector,
        view: TemplateRenderer,
        not_found: tuple[type, str],
        resolver: ParamResolver | None = None,
        config: AppConfig | None = None,
    ) -> None:
        self._routes = tuple(routes)
        self._injector = injector
        self._view = view
        self._not_found = not_found
        self._resolver = resolver or ParamResolver()
        self._config = config or AppConfig()

    @property
    def routes(self) -> tuple[RouteDescriptor, ...]:
        return self._routes

    # -- Lookup --

    def lookup(self, request: Request) -> DispatchTarget:
        """Find and bind the target for ``request.path``.

        Always returns a target: the not-found fallback when neither
        lookup stage matches.
        """
        parts = split_path(request.path)
        try:
            return self._lookup_convention(parts, request)
        except RouteNotFound as exc:
            logger.debug("Convention lookup failed for %s: %s", request.path, exc)
        try:
            return self._lookup_table(parts, request)
        except RouteNotFound as exc:
            logger.debug("Route table lookup failed for %s: %s", request.path, exc)

        controller, action = self._not_found
        args = self._bind(controller, action, (), request)
        if args is None:
            raise UnresolvableParameter(action, controller.__qualname__)
        return DispatchTarget(controller, action, tuple(args), not_found=True)

    def _lookup_convention(self, parts: Sequence[str], request: Request) -> DispatchTarget:
        names = [segment_name(p) for p in parts[:3]]
        module = names[0] if len(names) > 0 else self._config.default_module
        controller = names[1] if len(names) > 1 else "index"
        action = names[2] if len(names) > 2 else "index"
        for name in (module, controller, action):
            if not name.isidentifier() or name.startswith("_"):
                raise RouteNotFound(f"{name!r} is not a valid controller path segment")

        module_name = f"{self._config.controllers_package}.{module}.{controller}"
        try:
            found = importlib.import_module(module_name)
        except ModuleNotFoundError as exc:
            if exc.name is None or not module_name.startswith(exc.name):
                raise
            raise RouteNotFound(f"No controller module {module_name}") from None

        class_name = controller_class_name(controller)
        cls = getattr(found, class_name, None)
        if not isinstance(cls, type):
            raise RouteNotFound(f"{module_name} has no {class_name}")
        method = action_method_name(action)
        if not callable(getattr(cls, method, None)):
            raise RouteNotFound(f"{class_name} has no {method}")

        raw = list(parts[3:])
        args = self._bind_url(cls, method, [type_cast_from_string(p) for p in raw], raw, request)
        if args is None:
            raise RouteNotFound(f"Cannot bind {raw!r} to {class_name}.{method}")
        return DispatchTarget(cls, method, tuple(args))

    def _lookup_table(self, parts: Sequence[str], request: Request) -> DispatchTarget:
        for route in self._routes:
            captured = route.match(parts)
            if captured is None:
                continue
            values = {name: type_cast_from_string(raw) for name, raw in captured.items()}
            args = self._bind_url(route.controller, route.action, values, captured, request)
            if args is None:
                logger.debug("Route %s matched but could not bind %r", route.path, captured)
                continue
            return DispatchTarget(route.controller, route.action, tuple(args))
        raise RouteNotFound("No route table entry matches")

    def _bind_url(
        self,
        controller: type,
        action: str,
        coerced: RouteValues,
        raw: RouteValues,
        request: Request,
    ) -> list[Any] | None:
        """Bind URL values, coerced first and as the raw strings second.

        The second pass lets a ``str`` parameter take a segment that only
        looks numeric (a username like ``1337``).
        """
        args = self._bind(controller, action, coerced, request)
        if args is None and raw and raw != coerced:
            args = self._bind(controller, action, raw, request)
        return args

    def _bind(
        self,
        controller: type,
        action: str,
        values: RouteValues,
        request: Request,
    ) -> list[Any] | None:
        method = getattr(controller, action, None)
        if not callable(method):
            msg = f"{controller.__qualname__} has no action {action!r}"
            raise RoutingError(msg)
        return self._resolver.resolve(
            method,
            values,
            form=request.form,
            session=request.session,
            files=request.files,
        )

    # -- Dispatch --

    async def handle_request(self, request: Request) -> Response:
        """Route ``request`` and return the response its outcome produces."""
        token = request_var.set(request)
        try:
            target = self.lookup(request)
            logger.debug("%s %s -> %s", request.method, request.path, target.label)
            return await self.dispatch(target, request)
        finally:
            request_var.reset(token)

    async def dispatch(self, target: DispatchTarget, request: Request) -> Response:
        """Run ``target`` and interpret its outcome, following forwards.

        Raises ``ForwardLoopDetected`` once a chain of forwards grows
        past ``max_forward_depth``.
        """
        status = 404 if target.not_found else 200
        controller_cls, action, args = target.controller, target.action, target.args
        chain = [target.label]

        while True:
            controller = self._injector.get(controller_cls)
            outcome = await invoke(getattr(controller, action), *args)

            match outcome:
                case Render(view=view, data=data):
                    return Response(self._view.render(view, data), status=status)
                case Redirect(url=url):
                    return Response(status=302).with_header("Location", url)
                case Forward(controller=next_cls, action=next_action, params=params):
                    if len(chain) > self._config.max_forward_depth:
                        raise ForwardLoopDetected(self._config.max_forward_depth, tuple(chain))
                    bound = self._bind(next_cls, next_action, params, request)
                    if bound is None:
                        raise UnresolvableParameter(
                            next_action, f"{next_cls.__qualname__} (forwarded)"
                        )
                    controller_cls, action, args = next_cls, next_action, tuple(bound)
                    chain.append(f"{next_cls.__qualname__}.{next_action}")
                    logger.debug("Forward %s -> %s", chain[-2], chain[-1])
                case _:
                    msg = (
                        f"{chain[-1]} returned {type(outcome).__name__}; "
                        "expected Render, Redirect, or Forward"
                    )
                    raise TypeError(msg)


def routes_from(table: Mapping[str, tuple[type, str]]) -> tuple[RouteDescriptor, ...]:
    """Build descriptors from a ``{path: (controller, action)}`` table, keeping its order."""
    return tuple(
        RouteDescriptor(path, controller, action) for path, (controller, action) in table.items()
    )
