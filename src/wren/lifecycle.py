"""Controller lifecycle bridge.

Controllers are built on enter and bridged into an external reactive
host when the host reports them as observed objects. The router never
assumes observability; it only asks the host.

Controller shapes::

    controller=Editor            # callable: called on every enter
    controller=make_editor       # def or async def returning an instance
    controller=shared_editor     # plain value: used as is
    controller=load_editor()     # awaitable: awaited on every enter

Hooks are optional methods on the instance::

    class Editor:
        async def on_enter(self, context: LifecycleContext) -> bool | None: ...
        def on_leave(self, context: LifecycleContext) -> bool | None: ...

Returning ``False`` (directly or through an awaitable) refuses the move.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from wren.router import Router
    from wren.routing.fragment import RouteFragment

F = TypeVar("F", bound=Callable[..., Any])


@dataclass(frozen=True, slots=True)
class LifecycleContext:
    """Passed to ``on_enter`` / ``on_leave``."""

    router: "Router"
    fragment: "RouteFragment"


@runtime_checkable
class ObservationHost(Protocol):
    """The reactive layer the router reports controller changes to.

    ``observe`` wraps a function so the host can track or batch its
    effects. ``root`` / ``unroot`` register an observed object with the
    host's dependency graph.
    """

    def observe(self, fn: F) -> F: ...

    def is_observed(self, obj: Any) -> bool: ...

    def root(self, obj: Any) -> None: ...

    def unroot(self, obj: Any) -> None: ...


class NullHost:
    """Host used when no reactive layer is attached. Observes nothing."""

    __slots__ = ()

    def observe(self, fn: F) -> F:
        return fn

    def is_observed(self, obj: Any) -> bool:
        return False

    def root(self, obj: Any) -> None:
        pass

    def unroot(self, obj: Any) -> None:
        pass


class ControllerBridge:
    """Builds controller instances and roots them with the host."""

    __slots__ = ("host",)

    def __init__(self, host: ObservationHost) -> None:
        self.host = host

    def build(self, fragment: "RouteFragment") -> Any:
        """Return the controller instance, or an awaitable settling to it.

        Callables are called with no arguments; anything else is the
        declared value itself.
        """
        controller = fragment.controller
        if callable(controller):
            return controller()
        return controller

    def attach(self, controller: Any) -> None:
        if controller is not None and self.host.is_observed(controller):
            self.host.root(controller)

    def release(self, controller: Any) -> None:
        if controller is not None and self.host.is_observed(controller):
            self.host.unroot(controller)
