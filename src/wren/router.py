"""Router — the transition state machine.

A URL arrives (``mount()``, ``transition_to()`` or a history callback),
the path is matched against the route tree, the winning chain is diffed
against the current one, controllers of the abandoned tail are left
deepest first and controllers of the new tail are entered shallowest
first. Then the notifications go out.

At most one transition runs at a time. A URL arriving while one is in
flight overwrites a single-slot buffer; the running transition notices
it at its next step boundary, stops scheduling further hooks, and the
buffered URL is handled next. Side effects already performed (resolve
providers called, controllers entered or left) are never undone.

Triggers are synchronous and must be called while an event loop is
running. Each one starts a single driver task eagerly: the transition
runs inside the call until it first waits on something, so a fully
synchronous transition is complete when the call returns.
``await router.settled()`` waits for the rest::

    router = Router([
        {"path": "", "component": Shell, "children": [
            {"path": "users/:id", "component": UserPage, "controller": UserController},
            Router.fallback_route(to="/"),
        ]},
    ])
    router.mount()
    await router.settled()
    await router.navigate("/users/42")

Error routing: an exception raised before the transition first waited
on anything (a resolve provider, an awaitable controller, an async hook)
is raised from the triggering call (``mount()``, ``transition_to()`` or
the history push). Once it has waited, errors go to the
``on_async_error`` listeners in registration order, or, with none
registered, fail the driver task. Either way the router stays
transitioning.
"""

import asyncio
import inspect
import logging
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any

from wren._internal.invoke import settle
from wren._internal.multimap import MultiValueMapping
from wren.config import RouterConfig
from wren.errors import (
    BasePathMismatch,
    ControllerContractViolation,
    RouteDefinitionError,
    RouteInUse,
    TopLevelRouteRefused,
)
from wren.events import BeforeChangeEvent, ChangeEvent, Listeners, UrlHandledEvent
from wren.history import History, MemoryHistory, NavigationOptions
from wren.lifecycle import ControllerBridge, LifecycleContext, NullHost, ObservationHost
from wren.rendering import compose
from wren.routing.fragment import RouteFragment, chains_equal, diff_chains
from wren.routing.matcher import match
from wren.routing.params import PathParams
from wren.routing.route import (
    FALLBACK_PATH,
    RouteDefinition,
    normalize_absolute_path,
)
from wren.routing.tree import (
    AbstractRouteFragment,
    RouteMap,
    TreeSnapshot,
    compile_routes,
    route_segments,
)
from wren.routing.validation import validate_level, validate_routes, validate_subtree
from wren.url import Url

logger = logging.getLogger("wren.router")

RouteInput = RouteDefinition | Mapping[str, Any]


class Redirect:
    """Controller that sends the router elsewhere as soon as it is entered."""

    __slots__ = ("to",)

    def __init__(self, to: str) -> None:
        self.to = to

    def __repr__(self) -> str:
        return f"Redirect({self.to!r})"

    def on_enter(self, context: LifecycleContext) -> None:
        context.router.transition_to(self.to)


def _empty_component(**kwargs: Any) -> None:
    return None


class Router:
    """Client-side view router.

    Attributes:
        current_chain: Entered fragments, root to leaf.
        current_fragment: Leaf of ``current_chain``, ``None`` when empty.
        target_fragment: Leaf of the chain being entered, while transitioning.
        is_transitioning: Set from the moment a URL is accepted until its
            transition settles. Stays set after a transition error.
        url: The last URL whose path was matched.
        params: Path parameters of the last match.
        is_mounted: Whether the router listens to its history.
    """

    def __init__(
        self,
        routes: Iterable[RouteInput] = (),
        *,
        config: RouterConfig | None = None,
        history: History | None = None,
        host: ObservationHost | None = None,
    ) -> None:
        self.config = config or RouterConfig()
        self.history: History = history if history is not None else MemoryHistory()
        self.host: ObservationHost = host if host is not None else NullHost()
        self.base_path = (
            normalize_absolute_path(self.config.base_path) if self.config.base_path else ""
        )

        self._routes: RouteMap = {}
        compile_routes(routes, self._routes)
        validate_routes(self._routes)

        self.current_chain: list[RouteFragment] = []
        self.current_fragment: RouteFragment | None = None
        self.target_fragment: RouteFragment | None = None
        self.is_transitioning = False
        self.url: Url | None = None
        self.params: MultiValueMapping = PathParams()
        self.is_mounted = False

        self._next_url: Url | None = None
        self._task: asyncio.Task[None] | None = None
        self._driving = False
        self._suspended = False
        self._bridge = ControllerBridge(self.host)

        self._before_change: Listeners[BeforeChangeEvent] = Listeners()
        self._change: Listeners[ChangeEvent] = Listeners()
        self._url_handled: Listeners[UrlHandledEvent] = Listeners()
        self._async_error: Listeners[BaseException] = Listeners()

        # Current-chain mutations are reported to the reactive host
        self._push_fragment = self.host.observe(self._push_fragment)
        self._pop_fragment = self.host.observe(self._pop_fragment)

    def __repr__(self) -> str:
        leaf = self.current_fragment.url_path if self.current_fragment else None
        return f"Router(current={leaf!r}, transitioning={self.is_transitioning})"

    # -- Mounting -----------------------------------------------------------

    def mount(self) -> None:
        """Listen to the history and handle its current URL."""
        if self.is_mounted:
            return
        self.history.on(self._handle_url)
        self.is_mounted = True
        self._handle_url(self.history.get_url())

    def unmount(self) -> None:
        """Stop listening. The current chain is left as it is."""
        if not self.is_mounted:
            return
        self.history.off(self._handle_url)
        self.is_mounted = False

    # -- Navigation ---------------------------------------------------------

    def transition_to(self, path: str) -> None:
        """Push *path* to the history; absolute paths get the base path."""
        self.history.push(self.full_path(path))

    async def navigate(self, path: str) -> None:
        """``transition_to`` then wait until the router settles."""
        self.transition_to(path)
        await self.settled()

    async def settled(self) -> None:
        """Wait for the driver task, re-raising a transition failure."""
        while self._task is not None:
            task = self._task
            await task
            if task is self._task:
                return

    def full_path(self, path: str) -> str:
        if self.base_path and path.startswith("/"):
            return self.base_path + path
        return path

    def path_of(self, url: Url) -> str:
        """The routable path of *url*, with the base path removed.

        Raises:
            BasePathMismatch: if *url* is outside the base path.
        """
        if not self.base_path:
            return url.path
        rest = url.path[len(self.base_path) :]
        if not url.path.startswith(self.base_path) or (rest and rest[0] != "/"):
            msg = f"URL doesn't start with the base path. Url: {url}. Base path: {self.base_path}"
            raise BasePathMismatch(msg)
        return normalize_absolute_path(rest)

    # -- Queries ------------------------------------------------------------

    def is_path_active(self, path: str) -> bool:
        """Whether *path* is exactly the current chain's URL path."""
        if self.current_fragment is None:
            return False
        return normalize_absolute_path(path) == normalize_absolute_path(
            self.current_fragment.url_path
        )

    def is_descendant_path_active(self, path: str) -> bool:
        """Whether the current URL path lies strictly below *path*."""
        if self.current_fragment is None:
            return False
        path = normalize_absolute_path(path)
        current = normalize_absolute_path(self.current_fragment.url_path)
        return current.startswith(path) and current[len(path) : len(path) + 1] == "/"

    def render(self) -> Any:
        """Compose the components of the current chain."""
        return compose(self.current_fragment)

    @staticmethod
    def fallback_route(to: str) -> RouteDefinition:
        """A ``*`` route that redirects to *to* when entered."""
        return RouteDefinition(path=FALLBACK_PATH, component=_empty_component, controller=Redirect(to))

    # -- Listeners ----------------------------------------------------------

    def on_before_change(self, callback: Callable[[BeforeChangeEvent], Any]) -> None:
        self._before_change.add(callback)

    def off_before_change(self, callback: Callable[[BeforeChangeEvent], Any]) -> None:
        self._before_change.discard(callback)

    def on_change(self, callback: Callable[[ChangeEvent], Any]) -> None:
        self._change.add(callback)

    def off_change(self, callback: Callable[[ChangeEvent], Any]) -> None:
        self._change.discard(callback)

    def on_url_handle(self, callback: Callable[[UrlHandledEvent], Any]) -> None:
        self._url_handled.add(callback)

    def off_url_handle(self, callback: Callable[[UrlHandledEvent], Any]) -> None:
        self._url_handled.discard(callback)

    def on_async_error(self, callback: Callable[[BaseException], Any]) -> None:
        self._async_error.add(callback)

    def off_async_error(self, callback: Callable[[BaseException], Any]) -> None:
        self._async_error.discard(callback)

    # -- Dynamic routes -----------------------------------------------------

    @property
    def routes(self) -> Mapping[str, AbstractRouteFragment]:
        """Read-only view of the top-level nodes."""
        return MappingProxyType(self._routes)

    def get(self, path: str | Iterable[str]) -> AbstractRouteFragment | None:
        """The node declared at *path* (raw segments), or ``None``."""
        segments = route_segments(path)
        node = self._routes.get(segments[0])
        if node is None:
            return None
        return node.find(segments[1:])

    def has(self, path: str | Iterable[str]) -> bool:
        return self.get(path) is not None

    def add(
        self,
        definition: RouteInput,
        parent: str | Iterable[str] | None = None,
    ) -> AbstractRouteFragment:
        """Compile *definition* at the top level or below *parent*.

        The touched subtree, its sibling level and *parent* are validated.
        On failure the tree is restored and the error re-raised.
        """
        parent_node = None if parent is None else self._require(parent)
        level = self._routes if parent_node is None else parent_node.children
        snapshot = TreeSnapshot(level)
        try:
            touched = compile_routes([definition], self._routes, parent_node)
            validate_level(level)
            for node in touched:
                validate_subtree(node)
            if parent_node is not None:
                validate_subtree(parent_node)
        except RouteDefinitionError:
            snapshot.restore()
            raise
        logger.debug("Added route %s", touched[0].readable_path)
        return touched[0]

    def remove(self, path: str | Iterable[str]) -> AbstractRouteFragment:
        """Detach the node at *path* and everything below it.

        Raises:
            KeyError: if nothing is declared at *path*.
            RouteInUse: if the node is part of the current or target chain.
        """
        node = self._require(path)
        in_use = list(self.current_chain)
        if self.target_fragment is not None:
            in_use.extend(self.target_fragment.chain())
        if any(fragment.abstract is node for fragment in in_use):
            msg = f"Route {node.readable_path} is part of the current route and cannot be removed."
            raise RouteInUse(msg)

        parent = node.parent
        level = self._routes if parent is None else parent.children
        snapshot = TreeSnapshot(level)
        del level[node.path]
        if parent is not None:
            try:
                validate_subtree(parent)
            except RouteDefinitionError:
                snapshot.restore()
                raise
        logger.debug("Removed route %s", node.readable_path)
        return node

    def _require(self, path: str | Iterable[str]) -> AbstractRouteFragment:
        node = self.get(path)
        if node is None:
            msg = f"Route {path!r} is not declared."
            raise KeyError(msg)
        return node

    # -- State machine ------------------------------------------------------

    def _handle_url(self, url: "str | Url", options: NavigationOptions | None = None) -> None:
        url = Url.parse(url)
        if self.is_transitioning or self._driving:
            self._next_url = url
            self._log("Buffered %s", url)
            return

        path = self.path_of(url)
        self.is_transitioning = True
        self._suspended = False
        self._driving = True
        self._task = asyncio.eager_task_factory(asyncio.get_running_loop(), self._drive(url, path))
        if self._task.done():
            # Nothing was waited on: a failure is raised to the caller
            self._task.result()

    async def _drive(self, url: Url, path: str) -> None:
        try:
            while True:
                refused = await self._transition(url, path)
                if self._next_url is None and refused is not None:
                    self._correct(url, refused)
                if self._next_url is None:
                    return
                url, self._next_url = self._next_url, None
                path = self.path_of(url)
                self.is_transitioning = True
        except Exception as exc:
            if not self._suspended or not self._async_error:
                raise
            logger.debug("Transition to %s failed: %r", url, exc)
            self._async_error.emit(exc)
        finally:
            self._driving = False

    def _correct(self, url: Url, refused: RouteFragment) -> None:
        if self.current_fragment is None:
            msg = (
                f"Top level route refusing to enter: {refused.abstract.readable_path}."
                f" Url: {refused.url_path}"
            )
            raise TopLevelRouteRefused(msg)
        correction = self.full_path(self.current_fragment.url_path)
        self._log("Refused %s, correcting to %s", url, correction)
        # Lands in the buffer: the driver is still running
        self.history.push(correction)

    async def _transition(self, url: Url, path: str) -> RouteFragment | None:
        """Run one transition. Returns the fragment whose hook refused, if any."""
        self._log("Transition to %s", url)
        leaf = await match(path, self._routes, url=url, wait=self._settle)
        if self._next_url is not None:
            self._log("Superseded %s by %s", url, self._next_url)
            return None

        old_url = self.url
        old_chain = list(self.current_chain)
        old_fragment = self.current_fragment
        target_chain = leaf.chain()

        self.url = url
        self.params = PathParams.from_chain(target_chain)
        self.target_fragment = leaf

        exits, enters = diff_chains(self.current_chain, target_chain)
        if exits or enters:
            self._before_change.emit(BeforeChangeEvent(old_fragment, leaf, self))

        refused = await self._exit_all(exits)
        if refused is None and self._next_url is None:
            refused = await self._enter_all(enters)

        self.is_transitioning = False
        self.target_fragment = None
        if not chains_equal(old_chain, self.current_chain):
            self._change.emit(ChangeEvent(old_fragment, self.current_fragment, self))
        self._url_handled.emit(UrlHandledEvent(old_url, url, self))
        return refused

    async def _exit_all(self, exits: list[RouteFragment]) -> RouteFragment | None:
        for fragment in reversed(exits):
            if not await self._exit(fragment):
                self._log("Leaving %s refused", fragment.url_path)
                return fragment
            self._pop_fragment(fragment)
            if self._next_url is not None:
                break
        return None

    async def _enter_all(self, enters: list[RouteFragment]) -> RouteFragment | None:
        for fragment in enters:
            if not await self._enter(fragment):
                self._log("Entering %s refused", fragment.url_path)
                return fragment
            self._push_fragment(fragment)
            if self._next_url is not None:
                break
        return None

    async def _exit(self, fragment: RouteFragment) -> bool:
        controller = fragment.controller_object
        on_leave = getattr(controller, "on_leave", None)
        if callable(on_leave):
            result = await self._settle(on_leave(LifecycleContext(self, fragment)))
            if result is False:
                return False
        self._bridge.release(controller)
        fragment.controller_object = None
        return True

    async def _enter(self, fragment: RouteFragment) -> bool:
        if fragment.controller is None:
            return True
        controller = await self._settle(self._bridge.build(fragment))
        if controller is None:
            msg = (
                "Controller not settled with a controller: "
                f"{fragment.abstract.readable_path}. Url: {fragment.url_path}"
            )
            raise ControllerContractViolation(msg)

        fragment.controller_object = controller
        self._bridge.attach(controller)
        on_enter = getattr(controller, "on_enter", None)
        if callable(on_enter):
            result = await self._settle(on_enter(LifecycleContext(self, fragment)))
            if result is False:
                self._bridge.release(controller)
                fragment.controller_object = None
                return False
        return True

    async def _settle(self, value: Any) -> Any:
        if inspect.isawaitable(value):
            self._suspended = True
        return await settle(value)

    def _push_fragment(self, fragment: RouteFragment) -> None:
        self.current_chain.append(fragment)
        self.current_fragment = fragment

    def _pop_fragment(self, fragment: RouteFragment) -> None:
        self.current_chain.pop()
        self.current_fragment = fragment.parent

    def _log(self, msg: str, *args: Any) -> None:
        if self.config.transition_logging:
            logger.debug(msg, *args)
