"""Tests for wren.events — listener registries and notification payloads."""

import dataclasses

import pytest

from wren.events import ChangeEvent, Listeners


class TestListeners:
    def test_emit_in_registration_order(self) -> None:
        seen: list[str] = []
        listeners: Listeners[int] = Listeners()
        listeners.add(lambda value: seen.append(f"first {value}"))
        listeners.add(lambda value: seen.append(f"second {value}"))
        listeners.emit(1)
        assert seen == ["first 1", "second 1"]

    def test_add_twice_is_a_no_op(self) -> None:
        seen: list[int] = []
        listeners: Listeners[int] = Listeners()
        listeners.add(seen.append)
        listeners.add(seen.append)
        listeners.emit(1)
        assert seen == [1]
        assert len(listeners) == 1

    def test_discard(self) -> None:
        seen: list[int] = []
        listeners: Listeners[int] = Listeners()
        listeners.add(seen.append)
        listeners.discard(seen.append)
        listeners.discard(seen.append)
        listeners.emit(1)
        assert seen == []
        assert not listeners

    def test_listener_may_unsubscribe_while_notified(self) -> None:
        seen: list[str] = []
        listeners: Listeners[int] = Listeners()

        def once(value: int) -> None:
            seen.append("once")
            listeners.discard(once)

        listeners.add(once)
        listeners.add(lambda value: seen.append("always"))
        listeners.emit(1)
        listeners.emit(2)
        assert seen == ["once", "always", "always"]

    def test_non_callable_rejected(self) -> None:
        listeners: Listeners[int] = Listeners()
        with pytest.raises(TypeError, match="The event listener must be a function."):
            listeners.add("nope")  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            listeners.discard(None)  # type: ignore[arg-type]

    def test_listener_errors_propagate(self) -> None:
        listeners: Listeners[int] = Listeners()

        def boom(value: int) -> None:
            raise RuntimeError("boom")

        listeners.add(boom)
        with pytest.raises(RuntimeError):
            listeners.emit(1)

    def test_contains_and_iter(self) -> None:
        listeners: Listeners[int] = Listeners()
        listeners.add(print)
        assert print in listeners
        assert list(listeners) == [print]


class TestPayloads:
    def test_frozen(self) -> None:
        event = ChangeEvent(old_fragment=None, current_fragment=None, router=None)  # type: ignore[arg-type]
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.old_fragment = None  # type: ignore[misc]
