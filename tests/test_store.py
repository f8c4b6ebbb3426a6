"""Tests for the base store engine and middleware."""

from __future__ import annotations

from typing import Any

import pytest

from mountstore.actions import Action, ActionType, InitAction
from mountstore.exceptions import DispatchInProgressError, MountConfigError
from mountstore.store import Store, apply_middleware, create_store


class _RecordingReducer:
    def __init__(self, result: Any = None) -> None:
        self.calls: list[tuple[Any, Action]] = []
        self.result = result

    def __call__(self, state: Any, action: Action) -> Any:
        self.calls.append((state, action))
        return state if self.result is None else self.result


INITIAL_STATE = {"bears": {"care": True, "stare": False}}


def test_initialization_reduces_init() -> None:
    reducer = _RecordingReducer()
    store = create_store(reducer, INITIAL_STATE)

    assert isinstance(store, Store)
    assert len(reducer.calls) == 1
    state, action = reducer.calls[0]
    assert state is INITIAL_STATE
    assert action.type == ActionType.INIT
    assert store.get_state() is INITIAL_STATE


def test_dispatch_replaces_state() -> None:
    new_state = {"bears": {"care": True, "stare": True}}
    reducer = _RecordingReducer()
    store = create_store(reducer, INITIAL_STATE)

    reducer.result = new_state
    returned = store.dispatch({"type": "STARE", "payload": "<3<3<3"})

    assert reducer.calls[-1][0] is INITIAL_STATE
    assert reducer.calls[-1][1].type == "STARE"
    assert returned.payload == "<3<3<3"  # type: ignore[attr-defined]
    assert store.get_state() is new_state


def test_subscribe_and_unsubscribe() -> None:
    order: list[str] = []

    def reducer(state: Any, action: Action) -> Any:
        order.append("reducer")
        return state

    store = create_store(reducer, {})
    order.clear()
    unsubscribe = store.subscribe(lambda: order.append("listener"))

    store.dispatch({"type": "STARE"})
    assert order == ["reducer", "listener"]

    order.clear()
    unsubscribe()
    unsubscribe()
    store.dispatch({"type": "STARE"})
    assert order == ["reducer"]


def test_replace_reducer_reduces_init_with_the_new_reducer() -> None:
    old = _RecordingReducer()
    store = create_store(old, INITIAL_STATE)
    old.calls.clear()

    new_state = {**INITIAL_STATE, "cousins": {"care": "true"}}
    new = _RecordingReducer(result=new_state)
    store.replace_reducer(new)

    assert old.calls == []
    assert len(new.calls) == 1
    assert isinstance(new.calls[0][1], InitAction)
    assert store.get_state() is new_state

    store.dispatch({"type": "STARE"})
    assert old.calls == []
    assert new.calls[-1][0] is new_state


def test_reducers_may_not_dispatch() -> None:
    holder: dict[str, Store] = {}

    def reducer(state: Any, action: Action) -> Any:
        if action.type == "nested":
            holder["store"].dispatch({"type": "inner"})
        return state

    holder["store"] = create_store(reducer, {})

    with pytest.raises(DispatchInProgressError):
        holder["store"].dispatch({"type": "nested"})

    # The failed dispatch leaves the store usable.
    holder["store"].dispatch({"type": "other"})


def test_non_callable_arguments_raise() -> None:
    with pytest.raises(MountConfigError):
        create_store("lol")  # type: ignore[arg-type]
    with pytest.raises(MountConfigError):
        create_store(lambda state, action: state, {}, "lol")  # type: ignore[arg-type]
    store = create_store(lambda state, action: state, {})
    with pytest.raises(MountConfigError):
        store.subscribe("lol")  # type: ignore[arg-type]
    with pytest.raises(MountConfigError):
        store.replace_reducer("lol")  # type: ignore[arg-type]


def test_enhancer_receives_store_creator() -> None:
    seen: list[tuple[Any, Any]] = []
    sentinel = object()

    def enhancer(create: Any) -> Any:
        def enhanced(reducer: Any, initial_state: Any) -> Any:
            seen.append((reducer, initial_state))
            return sentinel

        assert create is create_store
        return enhanced

    def reducer(state: Any, action: Action) -> Any:
        return state

    assert create_store(reducer, INITIAL_STATE, enhancer) is sentinel
    assert seen == [(reducer, INITIAL_STATE)]


class TestMiddleware:
    def test_first_middleware_runs_outermost(self) -> None:
        calls: list[str] = []

        def named(name: str) -> Any:
            def middleware(store: Any, next_dispatch: Any) -> Any:
                def dispatch(action: Action) -> Action:
                    calls.append(name)
                    return next_dispatch(action)

                return dispatch

            return middleware

        store = create_store(lambda state, action: state, {}, apply_middleware(named("first"), named("second")))
        store.dispatch({"type": "x"})

        assert calls == ["first", "second"]

    def test_middleware_can_swallow_actions(self) -> None:
        reducer = _RecordingReducer()

        def swallow(store: Any, next_dispatch: Any) -> Any:
            def dispatch(action: Action) -> Action:
                if action.type == "ignored":
                    return action
                return next_dispatch(action)

            return dispatch

        store = create_store(reducer, {}, apply_middleware(swallow))
        reducer.calls.clear()

        store.dispatch({"type": "ignored"})
        assert reducer.calls == []

        store.dispatch({"type": "kept"})
        assert [action.type for _, action in reducer.calls] == ["kept"]

    def test_middleware_sees_store_api(self) -> None:
        states: list[Any] = []

        def logger(store: Any, next_dispatch: Any) -> Any:
            def dispatch(action: Action) -> Action:
                result = next_dispatch(action)
                states.append(store.get_state())
                return result

            return dispatch

        store = create_store(lambda state, action: {"last": action.type}, {}, apply_middleware(logger))
        store.dispatch({"type": "x"})

        assert states == [{"last": "x"}]
