"""Single-threaded reducer store.

The mount layer composes on top of any store exposing ``get_state``,
``dispatch``, ``subscribe``, ``replace_reducer`` and ``wrap_dispatch``.
This module provides the default engine plus middleware support.

Dispatch is fully synchronous: the reducer runs, the new state is stored,
then listeners are notified, all before ``dispatch`` returns.
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any

from mountstore.actions import Action, coerce_action, init_action
from mountstore.exceptions import DispatchInProgressError, MountConfigError

Reducer = Callable[[Any, Action], Any]
Listener = Callable[[], None]
Dispatch = Callable[[Any], Action]
StoreCreator = Callable[..., Any]
Enhancer = Callable[[StoreCreator], StoreCreator]
Middleware = Callable[[Any, Dispatch], Dispatch]


class Store:
    """Holds one state tree and replaces it once per dispatched action."""

    def __init__(self, reducer: Reducer, initial_state: Any = None) -> None:
        if not callable(reducer):
            raise MountConfigError("Expected the reducer to be callable.")
        self._reducer = reducer
        self._state = initial_state
        self._listeners: list[Listener] = []
        self._dispatching = False
        self._dispatch: Dispatch = self._reduce
        self._reduce(init_action())

    def get_state(self) -> Any:
        return self._state

    def dispatch(self, action: Any) -> Action:
        return self._dispatch(coerce_action(action))

    def _reduce(self, action: Any) -> Action:
        action = coerce_action(action)
        if self._dispatching:
            raise DispatchInProgressError("Reducers may not dispatch actions.")

        self._dispatching = True
        try:
            self._state = self._reducer(self._state, action)
        finally:
            self._dispatching = False

        for listener in list(self._listeners):
            listener()
        return action

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* after every dispatch; returns an unsubscribe function."""
        if not callable(listener):
            raise MountConfigError("Expected the listener to be callable.")
        self._listeners.append(listener)
        subscribed = True

        def unsubscribe() -> None:
            nonlocal subscribed
            if not subscribed:
                return
            subscribed = False
            self._listeners.remove(listener)

        return unsubscribe

    def replace_reducer(self, next_reducer: Reducer) -> None:
        if not callable(next_reducer):
            raise MountConfigError("Expected the next reducer to be callable.")
        self._reducer = next_reducer
        self._reduce(init_action())

    def wrap_dispatch(self, wrapper: Callable[[Dispatch], Dispatch]) -> None:
        """Replace ``dispatch`` with ``wrapper(current_dispatch)``."""
        self._dispatch = wrapper(self._dispatch)


def create_store(reducer: Reducer, initial_state: Any = None, enhancer: Enhancer | None = None) -> Any:
    """Create a :class:`Store`, optionally through a store *enhancer*."""
    if enhancer is not None:
        if not callable(enhancer):
            raise MountConfigError("Expected the enhancer to be callable.")
        return enhancer(create_store)(reducer, initial_state)
    return Store(reducer, initial_state)


def apply_middleware(*middlewares: Middleware) -> Enhancer:
    """Build an enhancer installing *middlewares*; the first one runs outermost.

    A middleware is called as ``middleware(store, next_dispatch)`` and
    returns the dispatch function that replaces ``next_dispatch``.
    """

    def enhancer(create: StoreCreator) -> StoreCreator:
        def create_with_middleware(reducer: Reducer, initial_state: Any = None) -> Any:
            store = create(reducer, initial_state)
            for middleware in reversed(middlewares):
                store.wrap_dispatch(functools.partial(middleware, store))
            return store

        return create_with_middleware

    return enhancer
