"""Dynamic route fragments and chain arithmetic.

A :class:`RouteFragment` is one position of a matched chain for a
specific URL. Fragments are cheap: the matcher creates one per visited
node and throws most of them away. A fragment becomes part of the
router's current chain only after its controller entered successfully.
"""

from typing import Any

from wren.routing.route import normalize_absolute_path, normalize_path
from wren.routing.tree import AbstractRouteFragment


class RouteFragment:
    """One matched position: a static node plus the URL segment it consumed.

    Attributes:
        abstract: The static node this fragment was matched against.
        path: The consumed raw URL segment(s), ``None`` for pass-through
            nodes and for a fallback that consumed nothing.
        abstract_path: The node's declared segment.
        url_path: The absolute URL path up to and including this fragment.
        component: Taken from the node when the match was selected.
        controller: The controller definition, taken likewise.
        controller_object: The controller instance while entered.
        parent: The previous fragment in the chain.

    Fragments hash by identity so the matcher can key candidates on them.
    """

    __slots__ = (
        "abstract",
        "abstract_path",
        "component",
        "controller",
        "controller_object",
        "parent",
        "path",
        "url_path",
    )

    def __init__(
        self,
        abstract: AbstractRouteFragment,
        path: str | None,
        parent: "RouteFragment | None" = None,
    ) -> None:
        self.abstract = abstract
        self.path = path or None
        self.abstract_path = abstract.path
        self.parent = parent
        self.url_path = _url_path(self.path, parent)
        self.component = abstract.component
        self.controller: Any = abstract.controller
        self.controller_object: Any = None

    def __repr__(self) -> str:
        return f"RouteFragment({self.abstract.readable_path!r}, url_path={self.url_path!r})"

    def refresh(self) -> None:
        """Pick up component/controller added by a deferred resolution."""
        self.component = self.abstract.component
        self.controller = self.abstract.controller

    def same_position(self, other: "RouteFragment | None") -> bool:
        """Same static node and same consumed segment."""
        if other is None:
            return False
        return self.abstract is other.abstract and self.path == other.path

    def chain(self) -> list["RouteFragment"]:
        """Root-to-leaf list ending with this fragment."""
        chain: list[RouteFragment] = []
        fragment: RouteFragment | None = self
        while fragment is not None:
            chain.append(fragment)
            fragment = fragment.parent
        chain.reverse()
        return chain


def _url_path(path: str | None, parent: RouteFragment | None) -> str:
    if path:
        if parent is not None:
            return f"{normalize_path(parent.url_path)}/{path}"
        return normalize_absolute_path(path)
    if parent is not None:
        return parent.url_path
    return "/"


def chains_equal(first: list[RouteFragment], second: list[RouteFragment]) -> bool:
    if len(first) != len(second):
        return False
    return all(a.same_position(b) for a, b in zip(first, second, strict=True))


def diff_chains(
    current: list[RouteFragment],
    target: list[RouteFragment],
) -> tuple[list[RouteFragment], list[RouteFragment]]:
    """Split two chains after their longest common prefix.

    Returns ``(exits, enters)``: the tail of *current* that must be left and
    the tail of *target* that must be entered, both root-to-leaf. The first
    entering fragment is re-parented onto the last kept fragment so the
    resulting chain links through the fragments that actually hold
    controller instances.
    """
    common = 0
    for old, new in zip(current, target, strict=False):
        if not old.same_position(new):
            break
        common += 1

    exits = current[common:]
    enters = target[common:]
    if enters:
        enters[0].parent = current[common - 1] if common else None
    return exits, enters
