"""Path matching against the static route tree.

Every viable chain is collected with a score string: one digit per
matched node, root to leaf (see ``wren.routing.tree`` for the codes).
Pass-through nodes add ``"0"`` and never branch; a fallback node adds
nothing and swallows whatever is left. The winner is the candidate with
the greatest score whose node has a component once every touched node
finished its deferred resolution.
"""

from collections.abc import Awaitable, Callable, Iterable
from typing import Any
from urllib.parse import unquote

from wren._internal.invoke import settle
from wren.errors import RouteNotMatched
from wren.routing.fragment import RouteFragment
from wren.routing.resolver import await_resolutions, begin_resolution
from wren.routing.route import split_path
from wren.routing.tree import SCORE_EMPTY, AbstractRouteFragment, RouteMap

# Candidate endpoint -> accumulated score
Candidates = dict[RouteFragment, str]


def collect_candidates(path: str, routes: RouteMap) -> Candidates:
    """Walk every top-level node against *path* and return all endpoints."""
    segments = split_path(path)
    candidates: Candidates = {}
    for node in routes.values():
        _walk(node, segments, "", None, candidates)
    return candidates


def _walk(
    node: AbstractRouteFragment,
    segments: list[str],
    score: str,
    parent: RouteFragment | None,
    candidates: Candidates,
) -> None:
    if node.is_fallback:
        candidates[RouteFragment(node, "/".join(segments), parent)] = score
        return

    if node.path:
        if not segments:
            return
        code = node.match_code(unquote(segments[0]))
        if code is None:
            return
        fragment = RouteFragment(node, segments[0], parent)
        rest = segments[1:]
    else:
        code = SCORE_EMPTY
        fragment = RouteFragment(node, None, parent)
        rest = segments

    score += code
    if not rest:
        candidates[fragment] = score

    for child in node.children.values():
        _walk(child, rest, score, fragment, candidates)


def touched_nodes(candidates: Iterable[RouteFragment]) -> list[AbstractRouteFragment]:
    """Every static node on any candidate chain, each once, in first-seen order."""
    seen: dict[int, AbstractRouteFragment] = {}
    for leaf in candidates:
        fragment: RouteFragment | None = leaf
        while fragment is not None:
            seen.setdefault(id(fragment.abstract), fragment.abstract)
            fragment = fragment.parent
    return list(seen.values())


def select(candidates: Candidates, path: str) -> RouteFragment:
    """Pick the winning endpoint.

    Components are re-read from the static nodes first, since a deferred
    resolution may have supplied them after the walk.

    Raises:
        RouteNotMatched: if no candidate has a component.
    """
    for leaf in candidates:
        fragment: RouteFragment | None = leaf
        while fragment is not None:
            fragment.refresh()
            fragment = fragment.parent

    best: RouteFragment | None = None
    best_score = ""
    for fragment, score in candidates.items():
        # A fallback endpoint can score "", so the score alone cannot decide
        if fragment.component is not None and (best is None or score > best_score):
            best = fragment
            best_score = score

    if best is None:
        msg = f"Route {path} not matched."
        raise RouteNotMatched(msg)
    return best


async def match(
    path: str,
    routes: RouteMap,
    *,
    url: Any = None,
    wait: Callable[[Any], Awaitable[Any]] = settle,
) -> RouteFragment:
    """Match *path* and return the leaf fragment of the winning chain.

    Every node touched by any candidate is resolved before the winner is
    chosen. *wait* is awaited on the combined resolution, which lets the
    caller observe the suspension.
    """
    candidates = collect_candidates(path, routes)
    pending = [
        resolution
        for node in touched_nodes(candidates)
        if (resolution := begin_resolution(node, url or path)) is not None
    ]
    if pending:
        await wait(await_resolutions(pending))
    return select(candidates, path)
