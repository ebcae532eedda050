"""Tests for wren.lifecycle — controller construction and host rooting."""

import pytest
from support import Controller, RecordingHost, later

from wren.lifecycle import ControllerBridge, NullHost, ObservationHost
from wren.routing.fragment import RouteFragment
from wren.routing.tree import AbstractRouteFragment


def _fragment(controller: object) -> RouteFragment:
    node = AbstractRouteFragment("a")
    node.controller = controller
    return RouteFragment(node, "a")


class TestNullHost:
    def test_observe_returns_function(self) -> None:
        def fn() -> None:
            pass

        assert NullHost().observe(fn) is fn

    def test_observes_nothing(self) -> None:
        assert not NullHost().is_observed(Controller([], "a", observed=True))

    def test_satisfies_protocol(self) -> None:
        assert isinstance(NullHost(), ObservationHost)
        assert isinstance(RecordingHost(), ObservationHost)


class TestBuild:
    def test_class_is_instantiated(self) -> None:
        class Editor:
            pass

        built = ControllerBridge(NullHost()).build(_fragment(Editor))
        assert isinstance(built, Editor)

    def test_instance_is_used_as_is(self) -> None:
        instance = Controller([], "a")
        assert ControllerBridge(NullHost()).build(_fragment(instance)) is instance

    @pytest.mark.asyncio
    async def test_async_factory_returns_awaitable(self) -> None:
        instance = Controller([], "a")
        built = ControllerBridge(NullHost()).build(_fragment(lambda: later(instance)))
        assert await built is instance

    def test_missing_controller(self) -> None:
        assert ControllerBridge(NullHost()).build(_fragment(None)) is None


class TestRooting:
    def test_observed_controller_is_rooted(self, host: RecordingHost) -> None:
        bridge = ControllerBridge(host)
        controller = Controller([], "a", observed=True)
        bridge.attach(controller)
        bridge.release(controller)
        assert host.calls == [("root", controller), ("unroot", controller)]

    def test_plain_controller_is_passed_through(self, host: RecordingHost) -> None:
        bridge = ControllerBridge(host)
        controller = Controller([], "a")
        bridge.attach(controller)
        bridge.release(controller)
        bridge.release(None)
        assert host.calls == []
