"""Test doubles shared by the wren test modules."""

import asyncio
from collections.abc import Callable
from typing import Any


async def later(value: Any = None) -> Any:
    """Settle with *value* after one trip through the event loop."""
    await asyncio.sleep(0)
    return value


def view(name: str) -> Callable[..., Any]:
    """A component that renders to ``(name, children)``."""

    def component(*, controller: Any, fragment: Any, children: Any) -> tuple[str, Any]:
        return (name, children)

    component.__name__ = name
    return component


class Controller:
    """Controller instance that logs its hooks.

    *enter* / *leave* are returned from the hooks as is, or called with
    the context first when callable (use ``lambda ctx: later(False)`` for
    an asynchronous refusal).
    """

    def __init__(
        self,
        log: list[str],
        name: str,
        *,
        enter: Any = None,
        leave: Any = None,
        observed: bool = False,
    ) -> None:
        self.log = log
        self.name = name
        self.enter = enter
        self.leave = leave
        self.observed = observed

    def __repr__(self) -> str:
        return f"Controller({self.name!r})"

    def on_enter(self, context: Any) -> Any:
        self.log.append(f"enter {self.name}")
        return self.enter(context) if callable(self.enter) else self.enter

    def on_leave(self, context: Any) -> Any:
        self.log.append(f"leave {self.name}")
        return self.leave(context) if callable(self.leave) else self.leave


class RecordingHost:
    """Observation host that records every call.

    Objects with a truthy ``observed`` attribute count as observed.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.rooted: list[Any] = []

    def observe(self, fn: Callable[..., Any]) -> Callable[..., Any]:
        def observed(*args: Any, **kwargs: Any) -> Any:
            self.calls.append(("batch", fn.__name__))
            return fn(*args, **kwargs)

        return observed

    def is_observed(self, obj: Any) -> bool:
        return bool(getattr(obj, "observed", False))

    def root(self, obj: Any) -> None:
        self.calls.append(("root", obj))
        self.rooted.append(obj)

    def unroot(self, obj: Any) -> None:
        self.calls.append(("unroot", obj))
        self.rooted.remove(obj)
