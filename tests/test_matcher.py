"""Tests for wren.routing.matcher — scored matching with fallbacks."""

import pytest
from support import later, view

from wren.errors import RouteNotMatched
from wren.routing.matcher import collect_candidates, match, select, touched_nodes
from wren.routing.tree import RouteMap, compile_routes
from wren.routing.validation import validate_routes

page = view("page")


class _Controller:
    pass


def _routes(definitions: list[dict]) -> RouteMap:
    routes: RouteMap = {}
    compile_routes(definitions, routes)
    validate_routes(routes)
    return routes


def _match(path: str, routes: RouteMap):
    return select(collect_candidates(path, routes), path)


def _chain_paths(leaf) -> list[str]:
    return [fragment.abstract_path for fragment in leaf.chain()]


class TestScoring:
    def test_literal_beats_param(self) -> None:
        literal = view("literal")
        routes = _routes([{"path": ":name", "component": page}, {"path": "new", "component": literal}])
        assert _match("/new", routes).component is literal
        assert _match("/other", routes).component is page

    def test_param_beats_pattern(self) -> None:
        pattern = view("pattern")
        routes = _routes([{"path": r"^\d+$", "component": pattern}, {"path": ":id", "component": page}])
        assert _match("/42", routes).component is page

    def test_pattern_must_match_whole_segment(self) -> None:
        routes = _routes([{"path": r"^\d+$", "component": page}])
        assert _match("/42", routes).component is page
        with pytest.raises(RouteNotMatched):
            _match("/42a", routes)

    def test_scores_are_root_to_leaf_digits(self) -> None:
        routes = _routes([{"path": "users/:id", "component": page}])
        candidates = collect_candidates("/users/7", routes)
        assert list(candidates.values()) == ["32"]

    def test_deeper_exact_match_wins(self) -> None:
        shallow = view("shallow")
        routes = _routes([
            {"path": "a", "component": shallow, "children": [{"path": "b", "component": page}]},
            {"path": ":x/b", "component": view("param")},
        ])
        assert _match("/a/b", routes).component is page

    def test_segments_are_decoded_for_literals(self) -> None:
        routes = _routes([{"path": "with space", "component": page}])
        assert _match("/with%20space", routes).component is page

    def test_case_insensitive(self) -> None:
        routes = _routes([{"path": "About", "component": page, "case_insensitive": True}])
        assert _match("/aBOUT", routes).component is page
        strict = _routes([{"path": "About", "component": page}])
        with pytest.raises(RouteNotMatched):
            _match("/aBOUT", strict)


class TestPassThrough:
    def test_root_matches_empty_path(self) -> None:
        routes = _routes([{"component": page}])
        leaf = _match("/", routes)
        assert leaf.abstract_path == ""
        assert leaf.url_path == "/"

    def test_pass_through_chain_is_always_traversed(self) -> None:
        node: dict = {"path": "descendant", "component": page}
        for _ in range(5):
            node = {"path": "", "controller": _Controller, "children": [node]}
        routes = _routes([{"path": "ascendant", "controller": _Controller, "children": [node]}])

        candidates = collect_candidates("/ascendant/descendant", routes)
        leaf = select(candidates, "/ascendant/descendant")
        assert len(leaf.chain()) == 7
        assert _chain_paths(leaf) == ["ascendant", "", "", "", "", "", "descendant"]
        assert leaf.url_path == "/ascendant/descendant"
        assert candidates[leaf] == "3000003"

    def test_parent_with_controller_and_child(self) -> None:
        routes = _routes([
            {"component": page},
            {"path": "parent", "controller": _Controller},
            {"path": "parent/child", "component": page},
        ])
        leaf = _match("/parent/child", routes)
        assert len(leaf.chain()) == 2
        assert leaf.abstract_path == "child"
        assert leaf.parent is not None
        assert leaf.parent.controller is _Controller

    def test_pass_through_is_not_an_endpoint_while_segments_remain(self) -> None:
        routes = _routes([{"component": page}])
        with pytest.raises(RouteNotMatched, match="Route /a not matched"):
            _match("/a", routes)


class TestFallback:
    def test_fallback_consumes_the_rest(self) -> None:
        routes = _routes([{"path": "*", "component": page}])
        leaf = _match("/x/y", routes)
        assert leaf.path == "x/y"
        assert leaf.url_path == "/x/y"

    def test_fallback_matches_nothing_left(self) -> None:
        routes = _routes([{"path": "*", "component": page}])
        leaf = _match("/", routes)
        assert leaf.path is None
        assert leaf.url_path == "/"

    def test_real_match_beats_fallback(self) -> None:
        routes = _routes([{"path": "*", "component": view("fallback")}, {"path": "a", "component": page}])
        assert _match("/a", routes).component is page

    def test_nearest_fallback_wins(self) -> None:
        outer = view("outer")
        inner = view("inner")
        routes = _routes([
            {"path": "*", "component": outer},
            {"path": "parent", "component": page, "children": [{"path": "*", "component": inner}]},
        ])
        leaf = _match("/parent/test", routes)
        assert leaf.component is inner
        assert _chain_paths(leaf) == ["parent", "*"]
        assert _match("/other/test", routes).component is outer


class TestTouchedNodes:
    def test_every_node_on_every_candidate_chain_once(self) -> None:
        routes = _routes([
            {"path": "a", "component": page, "children": [{"path": ":x", "component": page}]},
            {"path": "*", "component": page},
        ])
        nodes = touched_nodes(collect_candidates("/a/b", routes))
        assert nodes == [routes["a"].children[":x"], routes["a"], routes["*"]]


class TestMatch:
    @pytest.mark.asyncio
    async def test_resolves_touched_nodes_before_selecting(self) -> None:
        calls: list[str] = []

        def load() -> object:
            calls.append("lazy")
            return later({"component": page})

        routes = _routes([{"path": "lazy", "resolve": load}])
        leaf = await match("/lazy", routes)
        assert leaf.component is page
        assert calls == ["lazy"]

        await match("/lazy", routes)
        assert calls == ["lazy"]

    @pytest.mark.asyncio
    async def test_untouched_nodes_are_not_resolved(self) -> None:
        calls: list[str] = []

        def load() -> object:
            calls.append("lazy")
            return later({"component": page})

        routes = _routes([{"path": "lazy", "resolve": load}, {"path": "home", "component": page}])
        await match("/home", routes)
        assert calls == []

    @pytest.mark.asyncio
    async def test_resolution_supplies_child_component(self) -> None:
        child = view("child")
        routes = _routes([{
            "path": "lazy",
            "resolve": lambda: later({"component": page, "children": [{"path": "child", "component": child}]}),
            "children": [{"path": "child"}],
        }])
        leaf = await match("/lazy/child", routes)
        assert leaf.component is child
        assert leaf.parent is not None
        assert leaf.parent.component is page

    @pytest.mark.asyncio
    async def test_wait_sees_the_pending_resolution(self) -> None:
        seen: list[object] = []

        async def wait(value: object) -> object:
            seen.append(value)
            return await value  # type: ignore[misc]

        routes = _routes([{"path": "lazy", "resolve": lambda: later({"component": page})}])
        await match("/lazy", routes, wait=wait)
        assert len(seen) == 1

        seen.clear()
        await match("/lazy", routes, wait=wait)
        assert seen == []

    @pytest.mark.asyncio
    async def test_not_matched(self) -> None:
        routes = _routes([{"path": "a", "component": page}])
        with pytest.raises(RouteNotMatched):
            await match("/b", routes)
