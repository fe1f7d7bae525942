"""Constructor injection for controllers and services.

Every constructible type has a *dependency table*: an ordered tuple of
``(parameter name, declared type, has default)`` entries. The table comes
from one of two places:

- an explicit ``__inject__`` class attribute mapping parameter names to
  types, for classes that want to state their wiring as data::

      class PostController(BaseController):
          __inject__ = {"response": Responder, "posts": PostService}

- otherwise the constructor's annotations, read once per type and cached.

``Injector.get()`` walks the table depth-first, building each class-typed
dependency with a recursive ``get()``. Registered factories always win,
at every level of the graph, so a type with primitive constructor
arguments (``Database(url)``) is wired by registering a factory for it::

    injector = Injector()
    injector.register(Database, lambda: db)
    controller = injector.get(PostController)

No instances are cached: each ``get()`` of an unregistered type builds a
fresh object graph. Factories decide their own lifetime.
"""

import functools
import inspect
import logging
import typing
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from candlewax.errors import NotInstantiable, UnresolvableParameter

logger = logging.getLogger("candlewax.di")

# Types that carry no wiring information of their own.
PRIMITIVES: frozenset[Any] = frozenset(
    {int, float, str, bool, bytes, complex, list, dict, tuple, set, frozenset, object, Any}
)

# Graphs here are a handful of levels deep; anything past this is a runaway.
MAX_DEPTH = 32


@dataclass(frozen=True, slots=True)
class Dependency:
    """One constructor parameter in a dependency table."""

    name: str
    annotation: Any
    has_default: bool

    @property
    def is_primitive(self) -> bool:
        return (
            self.annotation is inspect.Parameter.empty
            or self.annotation in PRIMITIVES
            or not isinstance(self.annotation, type)
        )


def _type_name(cls: Any) -> str:
    return getattr(cls, "__qualname__", None) or repr(cls)


def _check_instantiable(cls: Any) -> None:
    if not isinstance(cls, type):
        msg = f"{cls!r} is not a class and cannot be instantiated"
        raise NotInstantiable(msg)
    if getattr(cls, "_is_protocol", False):
        msg = f"{_type_name(cls)} is a protocol; register a factory for it"
        raise NotInstantiable(msg)
    if inspect.isabstract(cls):
        msg = f"{_type_name(cls)} is abstract; register a factory for it"
        raise NotInstantiable(msg)


@functools.cache
def dependency_table(cls: type) -> tuple[Dependency, ...]:
    """Return the dependency table for ``cls``.

    An explicit ``__inject__`` mapping wins. Otherwise the constructor's
    signature is read (string annotations resolved) and cached. A class
    without its own constructor has an empty table.
    """
    declared = getattr(cls, "__inject__", None)
    if declared is not None:
        return tuple(Dependency(name, annotation, False) for name, annotation in declared.items())

    if cls.__init__ is object.__init__:
        return ()

    init = cls.__init__
    try:
        hints = typing.get_type_hints(init)
    except NameError:
        hints = {}
    table: list[Dependency] = []
    for name, param in inspect.signature(init).parameters.items():
        if name == "self" or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        annotation = hints.get(name, param.annotation)
        table.append(Dependency(name, annotation, param.default is not param.empty))
    return tuple(table)


class Injector:
    """Builds fully wired instances of requested types.

    Usage::

        injector = Injector()
        injector.register(Mailer, LoggingMailer)
        account = injector.get(AccountController)
    """

    __slots__ = ("_factories", "_max_depth")

    def __init__(self, *, max_depth: int = MAX_DEPTH) -> None:
        self._factories: dict[type, Callable[[], Any]] = {}
        self._max_depth = max_depth

    def register(self, cls: type, factory: Callable[[], Any]) -> None:
        """Install a zero-argument factory for ``cls``.

        Replaces any earlier factory for the same type.
        """
        self._factories[cls] = factory

    def is_registered(self, cls: type) -> bool:
        return cls in self._factories

    def get[T](self, cls: type[T]) -> T:
        """Return an instance of ``cls`` with its dependency graph resolved.

        Raises ``UnresolvableParameter`` for any primitive constructor
        parameter, default or not, unless a factory is registered for its
        type, and ``NotInstantiable`` for abstract types, protocols, and
        dependency cycles.
        """
        return self._resolve(cls, ())

    def _resolve(self, cls: Any, chain: tuple[type, ...]) -> Any:
        factory = self._factories.get(cls)
        if factory is not None:
            return factory()

        if cls in chain:
            cycle = " -> ".join(_type_name(t) for t in (*chain, cls))
            msg = f"Circular dependency: {cycle}"
            raise NotInstantiable(msg)
        if len(chain) >= self._max_depth:
            path = " -> ".join(_type_name(t) for t in chain)
            msg = f"Dependency graph deeper than {self._max_depth} levels: {path}"
            raise NotInstantiable(msg)

        _check_instantiable(cls)
        chain = (*chain, cls)

        kwargs: dict[str, Any] = {}
        for dep in dependency_table(cls):
            if dep.annotation in self._factories or not dep.is_primitive:
                kwargs[dep.name] = self._resolve(dep.annotation, chain)
            else:
                raise UnresolvableParameter(dep.name, _type_name(cls))

        logger.debug("Constructing %s(%s)", _type_name(cls), ", ".join(kwargs))
        return cls(**kwargs)
