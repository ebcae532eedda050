"""Deferred route resolution.

A node declared with ``resolve`` gets its component, controller and the
payloads of its declared descendants from an asynchronous provider. The
provider runs at most once per node: the first matching attempt starts
it and every later attempt (including a concurrent one) awaits the same
future. A failed resolution stays failed.

After merging, the node is marked resolved and its subtree is validated
again, since nodes below it are no longer covered by its pending
provider.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Iterable
from typing import Any

import anyio

from wren._internal.invoke import shareable
from wren.errors import (
    AlreadyResolved,
    EmptyResolution,
    InvalidRouteDefinition,
    ResolveContractViolation,
    UnknownResolvedChild,
)
from wren.routing.route import EMPTY_PATH_SIGNAL, Resolution, ResolvedChild
from wren.routing.tree import AbstractRouteFragment, route_segments
from wren.routing.validation import validate_subtree

logger = logging.getLogger("wren.resolver")


def begin_resolution(node: AbstractRouteFragment, url: Any = None) -> Awaitable[None] | None:
    """Start (or join) the resolution of *node*.

    Returns ``None`` when there is nothing to wait for. The provider is
    called synchronously, so a provider that raises, or that returns a
    plain value, fails before any suspension.

    Raises:
        ResolveContractViolation: if the provider does not return an awaitable.
    """
    if node.is_resolved:
        return None
    if node._resolution is None:
        pending = node.resolve()  # type: ignore[misc]
        if not inspect.isawaitable(pending):
            msg = f"Route resolve() not returning an awaitable: {node.readable_path}. Url: {url}"
            raise ResolveContractViolation(msg)
        node._resolution = asyncio.ensure_future(_complete(node, pending, url))
    return node._resolution


async def _complete(node: AbstractRouteFragment, pending: Awaitable[Any], url: Any) -> None:
    payload = Resolution.coerce(await pending)
    merge_resolution(node, payload, url)
    node.is_resolved = True
    validate_subtree(node)
    logger.debug("Resolved route %s", node.readable_path)


def merge_resolution(
    node: AbstractRouteFragment,
    payload: Resolution | ResolvedChild,
    url: Any = None,
) -> None:
    """Merge a deferred payload into *node* and its declared descendants.

    Component and controller can only be added, never replaced. Children
    are addressed by path relative to *node* and must already be declared.
    """
    where = node.readable_path
    if payload.is_empty:
        msg = (
            "Route must be resolved with at least a component, a controller or children:"
            f" {where}. Url: {url}"
        )
        raise EmptyResolution(msg)

    if payload.component is not None:
        if not callable(payload.component):
            msg = f"Route was resolved with an invalid component: {where}. Url: {url}"
            raise InvalidRouteDefinition(msg)
        if node.component is not None:
            msg = f"Resolved route already has a component: {where}. Url: {url}"
            raise AlreadyResolved(msg)
        node.component = payload.component

    if payload.controller is not None:
        if node.controller is not None:
            msg = f"Resolved route already has a controller: {where}. Url: {url}"
            raise AlreadyResolved(msg)
        node.controller = shareable(payload.controller)

    node.is_defined = True

    for child in payload.iter_children():
        segments = route_segments(child.path)
        target = node.find(segments)
        if target is None:
            child_path = "/".join(segments) or EMPTY_PATH_SIGNAL
            msg = (
                f"Resolved route doesn't have a child with path {child_path}: {where}."
                f" Url: {url}"
            )
            raise UnknownResolvedChild(msg)
        merge_resolution(target, child, url)


async def await_resolutions(pending: Iterable[Awaitable[None]]) -> None:
    """Wait for every resolution, then raise the first failure in input order.

    All resolutions run to completion even when one fails, so the tree
    reflects every provider that did settle.
    """
    pending = list(pending)
    failures: list[BaseException | None] = [None] * len(pending)

    async def _wait(index: int, awaitable: Awaitable[None]) -> None:
        try:
            await awaitable
        except Exception as exc:
            failures[index] = exc

    async with anyio.create_task_group() as tg:
        for index, awaitable in enumerate(pending):
            tg.start_soon(_wait, index, awaitable)

    for failure in failures:
        if failure is not None:
            raise failure
