"""Static route tree and the compiler that builds it.

Declarations are compiled into per-level dicts of
:class:`AbstractRouteFragment` keyed by raw path segment. Multi-segment
paths (``"a/b"``) become a chain of single-segment nodes; declarations
that land on the same position share one node, so a node reachable
through two declared paths keeps a single identity.
"""

import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from wren._internal.invoke import shareable
from wren.errors import DuplicateRouteDefinition
from wren.routing.route import (
    EMPTY_PATH_SIGNAL,
    PathSegment,
    RouteDefinition,
    SegmentKind,
    split_path,
)

# Top-level routes: raw segment -> node
RouteMap = dict[str, "AbstractRouteFragment"]

# Match codes, compared as strings: exact > param > pattern
SCORE_EXACT = "3"
SCORE_PARAM = "2"
SCORE_PATTERN = "1"
SCORE_EMPTY = "0"


class AbstractRouteFragment:
    """A static node in the declared route tree.

    The path segment is fixed for the node's lifetime. ``is_defined``
    records whether some declaration supplied a payload (component,
    controller, resolve or case-insensitivity) rather than the node being
    only a structural ancestor.
    """

    __slots__ = (
        "_pattern",
        "_resolution",
        "case_insensitive",
        "children",
        "component",
        "controller",
        "is_defined",
        "is_resolved",
        "parent",
        "resolve",
        "segment",
    )

    def __init__(self, path: str, parent: "AbstractRouteFragment | None" = None) -> None:
        self.segment = PathSegment.parse(path)
        self.parent = parent
        self.children: RouteMap = {}
        self.component: Callable[..., Any] | None = None
        self.controller: Any = None
        self.resolve: Callable[[], Any] | None = None
        self.case_insensitive = False
        self.is_defined = False
        self.is_resolved = True
        # In-flight or finished resolution (see wren.routing.resolver)
        self._resolution: Any = None
        self._pattern: re.Pattern[str] | None = None

    def __repr__(self) -> str:
        return f"AbstractRouteFragment({self.readable_path!r})"

    @property
    def path(self) -> str:
        return self.segment.value

    @property
    def is_fallback(self) -> bool:
        return self.segment.kind is SegmentKind.FALLBACK

    @property
    def is_param(self) -> bool:
        return self.segment.kind is SegmentKind.PARAM

    @property
    def has_pending_resolve(self) -> bool:
        return self.resolve is not None and not self.is_resolved

    @property
    def readable_path(self) -> str:
        """Root-to-node path for error messages, ``{*empty*}`` for pass-through segments."""
        parts: list[str] = []
        node: AbstractRouteFragment | None = self
        while node is not None:
            parts.append(node.path or EMPTY_PATH_SIGNAL)
            node = node.parent
        return "/".join(reversed(parts))

    def ancestors(self) -> Iterator["AbstractRouteFragment"]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def is_inherited_resolvable(self) -> bool:
        """Whether some ancestor still has a pending deferred provider."""
        return any(node.has_pending_resolve for node in self.ancestors())

    def define(self, definition: RouteDefinition) -> None:
        """Attach the payload of *definition* to this node.

        Raises:
            DuplicateRouteDefinition: if another declaration already defined it.
        """
        if not definition.is_defining:
            return
        if self.is_defined:
            msg = f"Route {self.readable_path} is defined more than once."
            raise DuplicateRouteDefinition(msg)
        self.is_defined = True
        self.component = definition.component
        self.controller = shareable(definition.controller)
        self.resolve = definition.resolve
        self.is_resolved = definition.resolve is None
        self.case_insensitive = bool(definition.case_insensitive)

    def match_code(self, url_segment: str) -> str | None:
        """Score *url_segment* (already decoded) against this node's segment.

        Returns ``"3"`` for a literal match, ``"2"`` for a parameter,
        ``"1"`` for a pattern match and ``None`` for no match.
        """
        kind = self.segment.kind
        if kind is SegmentKind.PARAM:
            return SCORE_PARAM
        if kind is SegmentKind.PATTERN:
            if self._pattern is None:
                self._pattern = re.compile(self.path)
            return SCORE_PATTERN if self._pattern.fullmatch(url_segment) else None
        if self.path == url_segment:
            return SCORE_EXACT
        if self.case_insensitive and self.path.casefold() == url_segment.casefold():
            return SCORE_EXACT
        return None

    def find(self, segments: Iterable[str]) -> "AbstractRouteFragment | None":
        """Walk declared children by raw segment; ``None`` if any is missing."""
        node: AbstractRouteFragment = self
        for segment in segments:
            child = node.children.get(segment)
            if child is None:
                return None
            node = child
        return node

    def walk(self) -> Iterator["AbstractRouteFragment"]:
        """This node and every descendant, depth first."""
        yield self
        for child in self.children.values():
            yield from child.walk()


def route_segments(path: str | Iterable[str] | None) -> list[str]:
    """Raw declared segments for *path*; the empty path is the single ``""`` segment."""
    if path is None or isinstance(path, str):
        segments = split_path(path)
    else:
        segments = list(path)
    return segments or [""]


def compile_routes(
    definitions: Iterable[RouteDefinition | Mapping[str, Any]],
    routes: RouteMap | None = None,
    parent: AbstractRouteFragment | None = None,
) -> list[AbstractRouteFragment]:
    """Compile *definitions* into *routes* (or into *parent*'s children).

    Returns the nodes directly created or reused at the insertion level,
    in declaration order, so callers can validate only what changed.
    """
    level = parent.children if parent is not None else routes
    if level is None:
        msg = "compile_routes() needs either routes or a parent node"
        raise ValueError(msg)
    touched: list[AbstractRouteFragment] = []
    for definition in definitions:
        node = _compile(RouteDefinition.coerce(definition), parent, level)
        if node not in touched:
            touched.append(node)
    return touched


def _compile(
    definition: RouteDefinition,
    parent: AbstractRouteFragment | None,
    level: RouteMap,
) -> AbstractRouteFragment:
    segments = route_segments(definition.path)
    last = len(segments) - 1
    first: AbstractRouteFragment | None = None
    for i, segment in enumerate(segments):
        node = level.get(segment)
        if node is None:
            node = AbstractRouteFragment(segment, parent)
            level[segment] = node
        if i == last:
            node.define(definition)
        if first is None:
            first = node
        parent, level = node, node.children

    for child in definition.iter_children():
        _compile(child, parent, level)

    assert first is not None
    return first


# ---------------------------------------------------------------------------
# Snapshots (dynamic add/remove roll back on validation failure)
# ---------------------------------------------------------------------------

_STATE_FIELDS = (
    "component",
    "controller",
    "resolve",
    "case_insensitive",
    "is_defined",
    "is_resolved",
)


class TreeSnapshot:
    """Captured state of a level and everything below it."""

    __slots__ = ("_levels", "_nodes")

    def __init__(self, level: RouteMap) -> None:
        self._levels: list[tuple[RouteMap, RouteMap]] = []
        self._nodes: list[tuple[AbstractRouteFragment, tuple[Any, ...]]] = []
        self._capture(level)

    def _capture(self, level: RouteMap) -> None:
        self._levels.append((level, dict(level)))
        for node in level.values():
            self._nodes.append((node, tuple(getattr(node, name) for name in _STATE_FIELDS)))
            self._capture(node.children)

    def restore(self) -> None:
        for level, entries in self._levels:
            level.clear()
            level.update(entries)
        for node, state in self._nodes:
            for name, value in zip(_STATE_FIELDS, state, strict=True):
                setattr(node, name, value)
