"""Route declarations, deferred payloads and path segments.

Declarations are frozen dataclasses; plain mappings with the same keys
are accepted everywhere a declaration is expected and coerced through
:meth:`RouteDefinition.coerce` / :meth:`Resolution.coerce`.
"""

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any

from wren.errors import InvalidRouteDefinition

FALLBACK_PATH = "*"
EMPTY_PATH_SIGNAL = "{*empty*}"

_IDENTIFIER_RE = re.compile(r"^\w+$")


class SegmentKind(Enum):
    """How a raw declared segment matches a URL segment."""

    EMPTY = "empty"
    LITERAL = "literal"
    PARAM = "param"
    PATTERN = "pattern"
    FALLBACK = "fallback"


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed declared path segment.

    Empty:    ``""``        pass-through, consumes nothing
    Literal:  ``users``
    Param:    ``:id``       (param_name="id")
    Pattern:  ``^\\d+$``    (matched with ``re.fullmatch``)
    Fallback: ``*``         consumes whatever is left
    """

    value: str
    kind: SegmentKind
    param_name: str | None = None

    @classmethod
    def parse(cls, raw: str) -> "PathSegment":
        if not raw:
            return cls(raw, SegmentKind.EMPTY)
        if raw == FALLBACK_PATH:
            return cls(raw, SegmentKind.FALLBACK)
        if raw[0] == ":" and _IDENTIFIER_RE.match(raw[1:]):
            return cls(raw, SegmentKind.PARAM, param_name=raw[1:])
        if len(raw) > 1 and raw[0] == "^" and raw[-1] == "$":
            return cls(raw, SegmentKind.PATTERN)
        return cls(raw, SegmentKind.LITERAL)


def split_path(path: str | None) -> list[str]:
    """Split a path into its non-empty segments.

    Examples::

        "/a/b/"  -> ["a", "b"]
        ""       -> []
        None     -> []
    """
    if not path:
        return []
    return [part for part in path.split("/") if part]


def normalize_path(path: str) -> str:
    """Strip one trailing slash."""
    if path.endswith("/"):
        return path[:-1]
    return path


def normalize_absolute_path(path: str) -> str:
    """Ensure a leading slash and strip one trailing slash (``"/"`` -> ``""``)."""
    if path.startswith("/"):
        return normalize_path(path)
    return normalize_path(f"/{path}")


@dataclass(frozen=True, slots=True)
class RouteDefinition:
    """A declared route, possibly with nested children.

    Attributes:
        path: One or more segments (``"a/:id"``); empty means pass-through.
        component: Callable rendering this fragment.
        controller: Instance, constructor, or awaitable resolving to an instance.
        resolve: Callable returning an awaitable ``Resolution`` payload.
        case_insensitive: Match the literal segment ignoring case.
        children: Nested declarations, relative to this one.
    """

    path: str | None = None
    component: Callable[..., Any] | None = None
    controller: Any = None
    resolve: Callable[[], Any] | None = None
    case_insensitive: bool | None = None
    children: tuple["RouteDefinition | Mapping[str, Any]", ...] = ()

    @property
    def is_defining(self) -> bool:
        """Whether this declaration supplies a payload for its last node."""
        return (
            self.component is not None
            or self.controller is not None
            or self.resolve is not None
            or self.case_insensitive is not None
        )

    @classmethod
    def coerce(cls, value: "RouteDefinition | Mapping[str, Any]") -> "RouteDefinition":
        """Accept a ``RouteDefinition`` or a mapping with the same keys."""
        if isinstance(value, RouteDefinition):
            return value
        if not isinstance(value, Mapping):
            msg = f"Route declaration must be a RouteDefinition or a mapping, got {value!r}."
            raise InvalidRouteDefinition(msg)
        return cls(**_checked_kwargs(cls, value))

    def iter_children(self) -> Iterable["RouteDefinition"]:
        for child in self.children or ():
            yield RouteDefinition.coerce(child)


@dataclass(frozen=True, slots=True)
class Resolution:
    """The payload a ``resolve`` provider settles with.

    ``children`` are ``ResolvedChild`` entries addressing nodes that were
    already declared below the resolved one.
    """

    component: Callable[..., Any] | None = None
    controller: Any = None
    children: tuple["ResolvedChild | Mapping[str, Any]", ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.component is None and self.controller is None and not self.children

    @classmethod
    def coerce(cls, value: "Resolution | Mapping[str, Any] | None") -> "Resolution":
        if value is None:
            return cls()
        if isinstance(value, Resolution):
            return value
        if not isinstance(value, Mapping):
            msg = f"Route must be resolved with a Resolution or a mapping, got {value!r}."
            raise InvalidRouteDefinition(msg)
        return cls(**_checked_kwargs(cls, value))

    def iter_children(self) -> Iterable["ResolvedChild"]:
        for child in self.children or ():
            yield ResolvedChild.coerce(child)


@dataclass(frozen=True, slots=True)
class ResolvedChild:
    """A deferred payload for a declared descendant of a resolved node."""

    path: str | None = None
    component: Callable[..., Any] | None = None
    controller: Any = None
    children: tuple["ResolvedChild | Mapping[str, Any]", ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.component is None and self.controller is None and not self.children

    @classmethod
    def coerce(cls, value: "ResolvedChild | Mapping[str, Any]") -> "ResolvedChild":
        if isinstance(value, ResolvedChild):
            return value
        if not isinstance(value, Mapping):
            msg = f"Resolved child must be a ResolvedChild or a mapping, got {value!r}."
            raise InvalidRouteDefinition(msg)
        return cls(**_checked_kwargs(cls, value))

    def iter_children(self) -> Iterable["ResolvedChild"]:
        for child in self.children or ():
            yield ResolvedChild.coerce(child)


def _checked_kwargs(cls: type, value: Mapping[str, Any]) -> dict[str, Any]:
    allowed = {f.name for f in fields(cls)}
    unknown = sorted(set(value) - allowed)
    if unknown:
        msg = f"Unknown route keys {unknown}; expected a subset of {sorted(allowed)}."
        raise InvalidRouteDefinition(msg)
    kwargs = dict(value)
    if "children" in kwargs:
        kwargs["children"] = tuple(kwargs["children"] or ())
    return kwargs
