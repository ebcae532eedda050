"""Wren — a client-side view router.

Matches URLs against a tree of nested route declarations, resolves
deferred parts of the tree on demand, and drives an ordered enter/leave
lifecycle on per-fragment controllers as the active chain changes.

Basic usage::

    from wren import Router

    router = Router([
        {"path": "", "component": Shell, "children": [
            {"path": "inbox/:id", "component": Message, "controller": MessageController},
            Router.fallback_route(to="/"),
        ]},
    ])

    router.mount()
    await router.navigate("/inbox/42")
    router.params["id"]       # "42"
    router.render()
"""

__version__ = "0.1.0"
__all__ = [
    "AmbiguousRoute",
    "BasePathMismatch",
    "ChangeEvent",
    "History",
    "IncompleteRoute",
    "LifecycleContext",
    "MemoryHistory",
    "NullHost",
    "ObservationHost",
    "Resolution",
    "ResolvedChild",
    "RouteDefinition",
    "RouteFragment",
    "RouteNotMatched",
    "Router",
    "RouterConfig",
    "Url",
    "WrenError",
    "compose",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "Router":
        from wren.router import Router

        return Router

    if name == "RouterConfig":
        from wren.config import RouterConfig

        return RouterConfig

    if name in ("RouteDefinition", "Resolution", "ResolvedChild"):
        from wren.routing import route as _route

        return getattr(_route, name)

    if name == "RouteFragment":
        from wren.routing.fragment import RouteFragment

        return RouteFragment

    if name in ("History", "MemoryHistory"):
        from wren import history as _history

        return getattr(_history, name)

    if name in ("LifecycleContext", "NullHost", "ObservationHost"):
        from wren import lifecycle as _lifecycle

        return getattr(_lifecycle, name)

    if name == "ChangeEvent":
        from wren.events import ChangeEvent

        return ChangeEvent

    if name == "Url":
        from wren.url import Url

        return Url

    if name == "compose":
        from wren.rendering import compose

        return compose

    if name in (
        "AmbiguousRoute",
        "BasePathMismatch",
        "IncompleteRoute",
        "RouteNotMatched",
        "WrenError",
    ):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
