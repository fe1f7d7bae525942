"""Candlewax exception hierarchy.

Shared across the injector, router, and server boundary so every module
raises and catches the same types. Data-layer errors live in
``candlewax.data.errors`` and share the same root.
"""


class CandlewaxError(Exception):
    """Base for all candlewax-specific errors."""


class ConfigurationError(CandlewaxError):
    """Raised when application wiring is invalid."""


# -- Dependency injection --


class InjectionError(CandlewaxError):
    """Base for errors raised while constructing a dependency graph."""


class UnresolvableParameter(InjectionError):
    """A constructor parameter has no class type to build.

    Primitives (``int``, ``str``, ...) carry no information the injector
    could use to build a value. Register a factory for the owning type
    instead.
    """

    def __init__(self, parameter: str, owner: str = "") -> None:
        self.parameter = parameter
        self.owner = owner
        where = f" of {owner}" if owner else ""
        super().__init__(f"Cannot resolve primitive parameter {parameter!r}{where}")


class NotInstantiable(InjectionError):
    """The requested type is abstract, a protocol, or part of a cycle."""


# -- Routing --


class RoutingError(CandlewaxError):
    """Base for router errors."""


class RouteNotFound(RoutingError):  # noqa: N818
    """A lookup stage found no target.

    Never escapes the router: each stage recovers by falling through to
    the next one, and the last stage falls back to the not-found action.
    """


class ForwardLoopDetected(RoutingError):
    """A chain of forward outcomes exceeded the configured depth."""

    def __init__(self, depth: int, chain: tuple[str, ...] = ()) -> None:
        self.depth = depth
        self.chain = chain
        path = " -> ".join(chain)
        detail = f": {path}" if path else ""
        super().__init__(f"Forward depth limit of {depth} exceeded{detail}")
