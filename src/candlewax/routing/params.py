"""Bind request values to a controller action's parameters.

An action declares what it needs in its signature::

    def index_action(self, page_number: int = 1) -> Outcome: ...
    def store_action(self, post: Mapping[str, str], session: MutableMapping[str, Any]): ...

``ParamResolver.resolve()`` walks the declared parameters in order and
tries five sources for each one, first success wins:

1. the values bag: by name when it is a mapping, otherwise the next
   unconsumed positional value; the value must match the declared type
2. the submitted form, for a parameter named ``post``
3. the session, for a parameter named ``session``
4. the uploaded files, for a parameter named ``files``
5. the parameter's default

A parameter that no source satisfies fails the whole binding: the
result is ``None``, never a partial list.
"""

import functools
import inspect
import types
import typing
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

# Distinguishes "no default" from a default of None.
_MISSING: Any = object()

_DIGITS = frozenset("0123456789")


def _is_numeric(value: str) -> bool:
    text = value.strip()
    if not text:
        return False
    try:
        float(text)
    except ValueError:
        return False
    # float() also accepts "nan", "inf", "1e5" and "1_000"; a URL segment
    # is numeric only if it is plain digits with an optional sign and point.
    body = text.lstrip("+-")
    digits = body.replace(".", "", 1)
    return bool(digits) and set(digits) <= _DIGITS


def type_cast_from_string(value: str) -> Any:
    """Coerce a raw URL segment to the value it spells.

    Examples::

        "2"           -> 2
        "2.5"         -> 2.5
        "TRUE"        -> True
        "null"        -> None
        "hello-world" -> "hello-world"
    """
    if _is_numeric(value):
        return float(value) if "." in value else int(value)
    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered == "null":
        return None
    return value


@dataclass(frozen=True, slots=True)
class Parameter:
    """A declared action parameter."""

    name: str
    annotation: Any
    default: Any = _MISSING

    @property
    def has_default(self) -> bool:
        return self.default is not _MISSING


def action_parameters(func: Callable[..., Any]) -> tuple[Parameter, ...]:
    """Return the declared parameters of an action, ``self`` excluded.

    Accepts the function as defined on the class (``PostController.view_action``)
    or a bound method; the signature is read once per function.
    """
    return _parameters(getattr(func, "__func__", func))


@functools.cache
def _parameters(func: Callable[..., Any]) -> tuple[Parameter, ...]:
    try:
        hints = typing.get_type_hints(func)
    except NameError:
        hints = {}
    params: list[Parameter] = []
    for index, (name, param) in enumerate(inspect.signature(func).parameters.items()):
        if index == 0 and name in ("self", "cls"):
            continue
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        annotation = hints.get(name, param.annotation)
        default = _MISSING if param.default is param.empty else param.default
        params.append(Parameter(name, annotation, default))
    return tuple(params)


def _accepts(annotation: Any, value: Any) -> tuple[bool, Any]:
    """Check ``value`` against a declared type.

    Returns ``(matched, value)``; an ``int`` bound to a ``float``
    parameter is widened. ``bool`` never satisfies ``int``.
    """
    if annotation is inspect.Parameter.empty or annotation is Any:
        return True, value
    if annotation is None or annotation is type(None):
        return value is None, value

    origin = typing.get_origin(annotation)
    if origin is types.UnionType or origin is typing.Union:
        for member in typing.get_args(annotation):
            matched, bound = _accepts(member, value)
            if matched:
                return True, bound
        return False, value
    if origin is not None:
        annotation = origin

    if not isinstance(annotation, type):
        return True, value
    if annotation is float and isinstance(value, int) and not isinstance(value, bool):
        return True, float(value)
    if annotation is int and isinstance(value, bool):
        return False, value
    return isinstance(value, annotation), value


class ParamResolver:
    """Produces positional argument lists for controller actions.

    Usage::

        resolver = ParamResolver()
        args = resolver.resolve(PostController.index_action, [2])
        # [2]
        args = resolver.resolve(PostController.index_action, {})
        # [1] (the default)
    """

    __slots__ = ()

    def resolve(
        self,
        func: Callable[..., Any],
        values: Mapping[str, Any] | Sequence[Any] = (),
        *,
        form: Mapping[str, Any] | None = None,
        session: Mapping[str, Any] | None = None,
        files: Mapping[str, Any] | None = None,
    ) -> list[Any] | None:
        """Bind ``values`` and ambient request state to ``func``'s parameters.

        Returns the ordered argument list, or ``None`` when any parameter
        cannot be satisfied.
        """
        if isinstance(values, Mapping):
            named: dict[str, Any] | None = dict(values)
            positional: list[Any] = []
        else:
            named = None
            positional = list(values)

        ambient = {"post": form, "session": session, "files": files}
        bound: list[Any] = []
        for param in action_parameters(func):
            found, value = self._from_values(param, named, positional)
            if not found:
                source = ambient.get(param.name)
                if source:
                    found, value = True, source
                elif param.has_default:
                    found, value = True, param.default
            if not found:
                return None
            bound.append(value)
        return bound

    @staticmethod
    def _from_values(
        param: Parameter,
        named: dict[str, Any] | None,
        positional: list[Any],
    ) -> tuple[bool, Any]:
        if named is not None:
            if param.name not in named:
                return False, None
            matched, value = _accepts(param.annotation, named[param.name])
            if matched:
                del named[param.name]
            return matched, value
        if not positional:
            return False, None
        matched, value = _accepts(param.annotation, positional[0])
        if matched:
            positional.pop(0)
        return matched, value
