"""URL sources for the router.

The router talks to any object satisfying :class:`History`. Callbacks
receive the new :class:`~wren.url.Url` and a :class:`NavigationOptions`.

:class:`MemoryHistory` keeps the entry stack in memory, for tests,
server-side composition and any host without a location bar::

    history = MemoryHistory("/inbox")
    router = Router(routes, history=history)
    router.mount()
    history.push("/inbox/42")
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal, Protocol, runtime_checkable

from wren.url import DEFAULT_ORIGIN, Url


@dataclass(frozen=True, slots=True)
class NavigationOptions:
    """How a URL change came about."""

    replace: bool = False
    source: Literal["push", "back", "forward"] = "push"


HistoryCallback = Callable[[Url, NavigationOptions | None], Any]


@runtime_checkable
class History(Protocol):
    """The URL source contract.

    ``push`` updates the visible URL and, if it actually changed,
    synchronously invokes every registered callback with the new URL.
    """

    def push(self, url: "str | Url", *, replace: bool = False) -> None: ...

    def get_url(self) -> Url: ...

    def on(self, callback: HistoryCallback) -> None: ...

    def off(self, callback: HistoryCallback) -> None: ...


class MemoryHistory:
    """An in-memory entry stack with back/forward navigation."""

    __slots__ = ("_callbacks", "_entries", "_index")

    def __init__(self, url: "str | Url" = "/", *, origin: str = DEFAULT_ORIGIN) -> None:
        self._entries: list[Url] = [Url.parse(url, base=f"{origin}/")]
        self._index = 0
        self._callbacks: dict[HistoryCallback, None] = {}

    def __repr__(self) -> str:
        return f"MemoryHistory({self.get_url().href!r}, entries={len(self._entries)})"

    @property
    def entries(self) -> tuple[Url, ...]:
        return tuple(self._entries)

    def get_url(self) -> Url:
        return self._entries[self._index]

    def push(self, url: "str | Url", *, replace: bool = False) -> None:
        """Navigate to *url*, resolved against the current URL."""
        new_url = Url.parse(url, base=self.get_url())
        if new_url == self.get_url():
            return
        if replace:
            self._entries[self._index] = new_url
        else:
            del self._entries[self._index + 1 :]
            self._entries.append(new_url)
            self._index += 1
        self._notify(NavigationOptions(replace=replace))

    def back(self) -> None:
        if self._index > 0:
            self._index -= 1
            self._notify(NavigationOptions(source="back"))

    def forward(self) -> None:
        if self._index < len(self._entries) - 1:
            self._index += 1
            self._notify(NavigationOptions(source="forward"))

    def on(self, callback: HistoryCallback) -> None:
        if not callable(callback):
            msg = "The history callback must be a function."
            raise TypeError(msg)
        self._callbacks[callback] = None

    def off(self, callback: HistoryCallback) -> None:
        self._callbacks.pop(callback, None)

    def _notify(self, options: NavigationOptions) -> None:
        url = self.get_url()
        for callback in list(self._callbacks):
            callback(url, options)
