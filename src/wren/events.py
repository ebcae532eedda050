"""Router notifications.

Payloads are frozen dataclasses (immutable, safe to hand to any
listener). Each notification kind has its own :class:`Listeners`
registry on the router::

    router.on_change(lambda event: print(event.current_fragment))
    router.on_async_error(report)
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from wren.router import Router
    from wren.routing.fragment import RouteFragment
    from wren.url import Url

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class BeforeChangeEvent:
    """Emitted once a target chain is known and it differs from the current one."""

    current_fragment: "RouteFragment | None"
    target_fragment: "RouteFragment"
    router: "Router"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """Emitted after a transition that changed the current chain."""

    old_fragment: "RouteFragment | None"
    current_fragment: "RouteFragment | None"
    router: "Router"


@dataclass(frozen=True, slots=True)
class UrlHandledEvent:
    """Emitted after every completed transition, changed or not."""

    old_url: "Url | None"
    url: "Url"
    router: "Router"


class Listeners(Generic[T]):
    """An ordered set of callbacks.

    Adding a listener twice is a no-op; listeners run in the order they
    were first added. Exceptions raised by a listener propagate to the
    emitter.
    """

    __slots__ = ("_callbacks",)

    def __init__(self) -> None:
        # dict as an insertion-ordered set
        self._callbacks: dict[Callable[[T], Any], None] = {}

    def add(self, callback: Callable[[T], Any]) -> None:
        _check_listener(callback)
        self._callbacks[callback] = None

    def discard(self, callback: Callable[[T], Any]) -> None:
        _check_listener(callback)
        self._callbacks.pop(callback, None)

    def emit(self, payload: T) -> None:
        # Snapshot: a listener may unsubscribe while being notified
        for callback in list(self._callbacks):
            callback(payload)

    def __iter__(self) -> Iterator[Callable[[T], Any]]:
        return iter(list(self._callbacks))

    def __len__(self) -> int:
        return len(self._callbacks)

    def __contains__(self, callback: object) -> bool:
        return callback in self._callbacks


def _check_listener(callback: object) -> None:
    if not callable(callback):
        msg = "The event listener must be a function."
        raise TypeError(msg)
