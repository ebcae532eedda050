"""Compose the current chain into nested elements.

Each fragment's component wraps the element produced by the fragments
below it, innermost first. Fragments without a component pass their
child element through unchanged::

    def Layout(*, controller, fragment, children):
        return ["layout", children]

    compose(router.current_fragment)   # -> ["layout", ["page", None]]
"""

from typing import Any

from wren.routing.fragment import RouteFragment


def compose(fragment: RouteFragment | None) -> Any:
    """Build the element for the chain ending at *fragment*.

    Components are called with keyword arguments ``controller`` (the
    entered instance), ``fragment`` and ``children`` (the composed inner
    element, ``None`` at the leaf). Returns ``None`` for an empty chain.
    """
    element: Any = None
    while fragment is not None:
        if fragment.component is not None:
            element = fragment.component(
                controller=fragment.controller_object,
                fragment=fragment,
                children=element,
            )
        fragment = fragment.parent
    return element
