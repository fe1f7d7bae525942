"""Route descriptors and dispatch targets as frozen dataclasses."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from candlewax.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route template.

    Literal:      ``/discussion``    (is_param=False)
    Placeholder:  ``/{page_number}`` (is_param=True, param_name="page_number")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None


def split_path(path: str) -> list[str]:
    """Split a URL path into its non-empty ``/``-separated segments.

    The query string, if any, is dropped::

        "/p/hello-world?x=1" -> ["p", "hello-world"]
        "//discussion/"      -> ["discussion"]
    """
    path = path.split("?", 1)[0]
    return [part for part in path.split("/") if part]


def parse_path(path: str) -> tuple[PathSegment, ...]:
    """Parse a route template into segments.

    Examples::

        "/discussion"           -> (PathSegment("discussion"),)
        "/discussion/{page}"    -> (PathSegment("discussion"),
                                    PathSegment("{page}", is_param=True, param_name="page"))
    """
    segments: list[PathSegment] = []
    for part in split_path(path):
        if part.startswith("{") and part.endswith("}"):
            name = part[1:-1]
            if not name.isidentifier():
                msg = (
                    f"Invalid placeholder {part!r} in route {path!r}. "
                    "Placeholder names must be valid Python identifiers."
                )
                raise ConfigurationError(msg)
            segments.append(PathSegment(value=part, is_param=True, param_name=name))
        elif "{" in part or "}" in part:
            msg = f"Placeholders must fill a whole segment: {part!r} in route {path!r}"
            raise ConfigurationError(msg)
        else:
            segments.append(PathSegment(value=part))
    return tuple(segments)


@dataclass(frozen=True, slots=True)
class RouteDescriptor:
    """An explicit path template bound to a controller action.

    Usage::

        RouteDescriptor("/p/{slug}", PostController, "view_action")
    """

    path: str
    controller: type
    action: str
    segments: tuple[PathSegment, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "segments", parse_path(self.path))
        names = [s.param_name for s in self.segments if s.is_param]
        if len(names) != len(set(names)):
            msg = f"Duplicate placeholder names in route {self.path!r}"
            raise ConfigurationError(msg)

    def match(self, parts: Sequence[str]) -> dict[str, str] | None:
        """Match URL segments against this template.

        Returns the raw placeholder values by name, or ``None``. Segment
        counts must be equal; there are no optional trailing segments.
        """
        if len(parts) != len(self.segments):
            return None
        captured: dict[str, str] = {}
        for segment, part in zip(self.segments, parts, strict=True):
            if segment.is_param:
                captured[segment.param_name or ""] = part
            elif segment.value != part:
                return None
        return captured


@dataclass(frozen=True, slots=True)
class DispatchTarget:
    """A resolved controller action with its bound arguments.

    ``not_found`` marks the fallback target; the response carries a 404.
    """

    controller: type
    action: str
    args: tuple[Any, ...] = ()
    not_found: bool = False

    @property
    def label(self) -> str:
        return f"{self.controller.__qualname__}.{self.action}"


type RouteValues = Mapping[str, Any] | Sequence[Any]
