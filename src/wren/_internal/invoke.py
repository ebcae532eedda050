"""Invoke helpers — settle sync or async results uniformly.

Route hooks, controller constructors and resolve providers can be
``def`` or ``async def``, and declared controllers can be plain values or
awaitables. Any code that consumes a user-provided value must handle both
cases. This module keeps the sync/async check in exactly one place.

Usage::

    from wren._internal.invoke import settle

    result = await settle(controller.on_enter(context))
"""

import asyncio
import inspect
from collections.abc import Awaitable, Generator
from typing import Any


async def settle(value: Any) -> Any:
    """Return *value*, awaiting it first if it is awaitable."""
    if inspect.isawaitable(value):
        value = await value
    return value


class SharedAwaitable:
    """An awaitable that can be awaited any number of times.

    Coroutines can only be awaited once. Declared controller values are
    awaited on every enter, so one-shot awaitables are wrapped in a future
    the first time they are awaited and the future is reused afterwards.
    """

    __slots__ = ("_awaitable", "_future")

    def __init__(self, awaitable: Awaitable[Any]) -> None:
        self._awaitable = awaitable
        self._future: asyncio.Future[Any] | None = None

    def __await__(self) -> Generator[Any, None, Any]:
        if self._future is None:
            self._future = asyncio.ensure_future(self._awaitable)
        return self._future.__await__()

    def __repr__(self) -> str:
        return f"SharedAwaitable({self._awaitable!r})"


def shareable(value: Any) -> Any:
    """Wrap one-shot awaitables in :class:`SharedAwaitable`; pass others through."""
    if inspect.isawaitable(value) and not isinstance(value, (asyncio.Future, SharedAwaitable)):
        return SharedAwaitable(value)
    return value
