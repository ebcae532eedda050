"""Structural invariants of the static route tree.

Run over the whole tree when a router is built, and again over the
smallest affected subtree after a deferred resolution or a dynamic
add/remove. Every rule raises a ``RouteDefinitionError`` subclass naming
the offending node by its readable path.

A node is *resolvable* when it, or any ancestor, still has a pending
deferred provider: the provider may yet supply the missing component,
so completeness rules are relaxed for it.
"""

from collections import defaultdict

from wren.errors import AmbiguousRoute, IncompleteRoute, InvalidRouteDefinition
from wren.routing.route import SegmentKind
from wren.routing.tree import AbstractRouteFragment, RouteMap


def validate_routes(routes: RouteMap) -> None:
    """Validate every level of the tree rooted at *routes*."""
    validate_level(routes)
    for node in routes.values():
        validate_node(node, parent_resolvable=False)


def validate_subtree(node: AbstractRouteFragment) -> None:
    """Validate *node* and its descendants, inheriting ancestor resolvability."""
    validate_node(node, parent_resolvable=node.is_inherited_resolvable())


def validate_level(level: RouteMap) -> None:
    """Sibling rules for one level of the tree.

    - at most one parameter segment
    - literal segments may only collide after case folding when none of
      the colliding siblings is case-insensitive
    """
    params = [node for node in level.values() if node.segment.kind is SegmentKind.PARAM]
    if len(params) > 1:
        paths = ", ".join(node.readable_path for node in params)
        msg = f"Routes {paths} are ambiguous: only one parameter segment is allowed per level."
        raise AmbiguousRoute(msg)

    folded: dict[str, list[AbstractRouteFragment]] = defaultdict(list)
    for node in level.values():
        if node.segment.kind is SegmentKind.LITERAL:
            folded[node.path.casefold()].append(node)
    for nodes in folded.values():
        if len(nodes) > 1 and any(node.case_insensitive for node in nodes):
            paths = ", ".join(node.readable_path for node in nodes)
            msg = f"Routes {paths} are ambiguous when matched case-insensitively."
            raise AmbiguousRoute(msg)


def validate_node(node: AbstractRouteFragment, *, parent_resolvable: bool) -> None:
    """Node rules for *node*, then recurse into its children."""
    has_children = bool(node.children)
    is_resolvable = node.has_pending_resolve or parent_resolvable
    where = node.readable_path

    # A consumed provider no longer counts
    if (
        not has_children
        and node.component is not None
        and node.controller is not None
        and node.has_pending_resolve
    ):
        msg = (
            f"Route {where} cannot have all three: component, controller and resolve,"
            " if it doesn't have children."
        )
        raise InvalidRouteDefinition(msg)

    if node.component is not None and not callable(node.component):
        msg = f"Route {where} has an invalid component."
        raise InvalidRouteDefinition(msg)

    if node.has_pending_resolve and not callable(node.resolve):
        msg = f"Route {where} cannot have a non-callable resolve."
        raise InvalidRouteDefinition(msg)

    if node.is_fallback:
        if has_children:
            msg = f"Route {where} is a fallback route and must not have children."
            raise InvalidRouteDefinition(msg)
        if node.component is None and not is_resolvable:
            msg = f"Route {where} is a fallback route and must have a component."
            raise IncompleteRoute(msg)

    if (
        not is_resolvable
        and node.component is None
        and (not has_children or (not node.path and node.controller is None))
    ):
        msg = (
            f"Route {where} must have at least either a component"
            " or (a path and children) or (a controller and children)."
        )
        raise IncompleteRoute(msg)

    if has_children:
        validate_level(node.children)
        for child in node.children.values():
            validate_node(child, parent_resolvable=is_resolvable)
