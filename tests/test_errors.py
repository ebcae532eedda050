"""Tests for wren.errors — exception hierarchy and error messages."""

import pytest
from support import Controller, view

from wren.errors import (
    AlreadyResolved,
    AmbiguousRoute,
    BasePathMismatch,
    ControllerContractViolation,
    DuplicateRouteDefinition,
    EmptyResolution,
    IncompleteRoute,
    InvalidRouteDefinition,
    ResolutionError,
    ResolveContractViolation,
    RouteDefinitionError,
    RouteInUse,
    RouteNotMatched,
    RoutingError,
    TopLevelRouteRefused,
    TransitionError,
    UnknownResolvedChild,
    WrenError,
)
from wren.router import Router


class TestHierarchy:
    @pytest.mark.parametrize(
        "error",
        [DuplicateRouteDefinition, AmbiguousRoute, IncompleteRoute, InvalidRouteDefinition, RouteInUse],
    )
    def test_structural(self, error: type[Exception]) -> None:
        assert issubclass(error, RouteDefinitionError)

    @pytest.mark.parametrize(
        "error",
        [ResolveContractViolation, AlreadyResolved, UnknownResolvedChild, EmptyResolution],
    )
    def test_resolution(self, error: type[Exception]) -> None:
        assert issubclass(error, ResolutionError)

    @pytest.mark.parametrize("error", [RouteNotMatched, BasePathMismatch])
    def test_routing(self, error: type[Exception]) -> None:
        assert issubclass(error, RoutingError)

    @pytest.mark.parametrize("error", [ControllerContractViolation, TopLevelRouteRefused])
    def test_transition(self, error: type[Exception]) -> None:
        assert issubclass(error, TransitionError)

    @pytest.mark.parametrize(
        "error",
        [RouteDefinitionError, ResolutionError, RoutingError, TransitionError],
    )
    def test_everything_is_a_wren_error(self, error: type[Exception]) -> None:
        assert issubclass(error, WrenError)


class TestMessages:
    def test_construction_fails_on_structural_error(self) -> None:
        with pytest.raises(IncompleteRoute) as exc_info:
            Router([{"path": "a", "children": [{"path": "", "controller": Controller([], "c")}]}])
        assert str(exc_info.value).startswith("Route a/{*empty*} must have")

    @pytest.mark.asyncio
    async def test_not_matched_names_the_path(self) -> None:
        router = Router([{"path": "a", "component": view("a")}])
        with pytest.raises(RouteNotMatched, match="Route / not matched."):
            router.mount()
