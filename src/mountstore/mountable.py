"""Mountable stores.

A :class:`MountableStore` behaves like a plain store and additionally lets
independently written reducers be mounted at dotted paths of its state::

    store = create_mountable_store(root_reducer, {"rootOwn": "root"})
    host = store.mount("host", {"rootViewed": "rootOwn"})(host_reducer, {"hostOwn": "host"})
    host.get_state()  # {"rootViewed": "root", "hostOwn": "host"}

``mount`` returns a single-use :class:`MountedStoreCreator`; calling it
with a reducer activates the node and returns a :class:`MountedStore`
handle. Mounted stores may mount further stores beneath themselves.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Mapping
from typing import Any

from mountstore._redact import summarize_for_log
from mountstore.actions import (
    Action,
    QueryAction,
    coerce_action,
    init_action,
    mount_action,
    query_action,
    query_result_action,
    unmount_action,
)
from mountstore.config import MountStoreConfig
from mountstore.exceptions import MountConfigError, MountUsageError
from mountstore.mounts.pipeline import ReductionPipeline
from mountstore.mounts.registry import MountNode, MountRegistry
from mountstore.mounts.viewed import normalize_viewed_state_spec
from mountstore.paths import join_path
from mountstore.store import Dispatch, Enhancer, Listener, Reducer, StoreCreator, create_store

_logger = logging.getLogger(__name__)


class MountableStore:
    """Store whose state tree hosts independently reduced sub-stores."""

    def __init__(
        self,
        reducer: Reducer,
        initial_state: Any = None,
        *,
        config: MountStoreConfig | None = None,
        store_factory: StoreCreator = create_store,
    ) -> None:
        if not callable(reducer):
            raise MountConfigError("Expected the reducer to be callable.")
        self._config = config or MountStoreConfig()
        self._registry = MountRegistry()
        self._pipeline = ReductionPipeline(reducer, self._registry, config=self._config)
        self._dispatch: Dispatch = self._dispatch_default
        self._store = store_factory(self._pipeline, initial_state)

    @property
    def config(self) -> MountStoreConfig:
        return self._config

    def get_state(self) -> Any:
        return self._store.get_state()

    def dispatch(self, action: Any) -> Action:
        action = coerce_action(action)
        if self._config.trace_enabled:
            _logger.debug(
                "Dispatching %s",
                summarize_for_log(
                    action,
                    max_string=self._config.trace_max_string,
                    max_items=self._config.trace_max_items,
                ),
            )
        return self._dispatch(action)

    def _dispatch_default(self, action: Any) -> Action:
        # Middleware may forward plain mappings.
        action = coerce_action(action)
        if isinstance(action, QueryAction):
            # Nothing upstream answered the query: bind the requested paths
            # straight out of this store's state.
            _logger.debug("Answering query for %s from store state", action.payload.path)
            return self._store.dispatch(query_result_action(action.payload.path, action.payload.query))
        return self._store.dispatch(action)

    def wrap_dispatch(self, wrapper: Callable[[Dispatch], Dispatch]) -> None:
        """Install a dispatch wrapper (middleware) in front of query handling."""
        self._dispatch = wrapper(self._dispatch)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self._store.subscribe(listener)

    def replace_reducer(self, next_reducer: Reducer) -> None:
        if not callable(next_reducer):
            raise MountConfigError("Expected the next reducer to be callable.")
        self._pipeline.reducer = next_reducer
        self._store.replace_reducer(self._pipeline)

    def mount(self, path: str, viewed_state_spec: Mapping[str, Any] | None = None) -> MountedStoreCreator:
        return self._mount(None, path, viewed_state_spec)

    def unmount(self, path: str) -> None:
        self._unmount(None, path)

    def mounted_paths(self) -> list[str]:
        """Every registered mount path, ancestors before descendants."""
        return self._registry.ordered_paths()

    def is_mounted(self, node: MountNode) -> bool:
        return self._registry.lookup(node.full_path) is node

    def _mount(
        self,
        host: str | None,
        path: str,
        viewed_state_spec: Mapping[str, Any] | None,
    ) -> MountedStoreCreator:
        if not isinstance(path, str) or not path:
            raise MountConfigError(f"Expected string path as first argument, got {path!r}")

        resolvers = normalize_viewed_state_spec(viewed_state_spec)
        node = self._registry.register(path, host, resolvers, state=self.get_state())
        _logger.debug("Registered mount %s", node.full_path)
        return MountedStoreCreator(self, node)

    def _unmount(self, host: str | None, path: str) -> None:
        if not isinstance(path, str) or not path:
            raise MountConfigError(f"Expected string path to unmount, got {path!r}")

        full_path = join_path(host, path)
        if full_path not in self._registry:
            raise MountUsageError(f"No such mount {full_path}")

        # Deepest first, so no reducer ever sees a child whose host is gone.
        for target in self._registry.subtree(full_path):
            self.dispatch(unmount_action(target))

    def _activate(self, node: MountNode, reducer: Reducer, initial_state: Any) -> MountedStore:
        if not self.is_mounted(node):
            raise MountUsageError(f"Mount {node.full_path} was unmounted before its store was created")

        node.reducer = reducer
        spliced = False
        try:
            self.dispatch(mount_action(node.full_path, initial_state))
            spliced = True
            self.dispatch(init_action(node.full_path))
        except Exception:
            node.reducer = None
            self._release(node, spliced=spliced)
            raise
        return MountedStore(self, node)

    def _release(self, node: MountNode, *, spliced: bool) -> None:
        """Free the path of a node whose activation failed."""
        if spliced:
            # The inactive node is skipped by reducers; UNMOUNT drops its subtree.
            self._store.dispatch(unmount_action(node.full_path))
        else:
            self._registry.unregister(node.full_path)
        _logger.debug("Released mount %s after failed activation", node.full_path)


class MountedStoreCreator:
    """Single-use factory returned by ``mount``.

    The mount node is handed over on the first call; every later call
    raises :class:`MountUsageError`.
    """

    def __init__(self, store: MountableStore, node: MountNode) -> None:
        self._store = store
        self._path = node.full_path
        self._node: MountNode | None = node

    @property
    def path(self) -> str:
        return self._path

    @property
    def consumed(self) -> bool:
        return self._node is None

    def __call__(
        self,
        reducer: Reducer,
        initial_state: Mapping[str, Any] | None = None,
        enhancer: Enhancer | None = None,
    ) -> MountedStore:
        node, self._node = self._node, None
        if node is None:
            raise MountUsageError(
                "This mounted store creator has already been called. "
                "Mounted store creators are single-use."
            )
        if enhancer is not None:
            raise MountUsageError("Mounted stores do not support store enhancers")
        if not callable(reducer):
            raise MountConfigError("Expected the reducer to be callable.")
        if initial_state is not None and not isinstance(initial_state, Mapping):
            raise MountConfigError(f"Expected a mapping as mounted initial state, got {initial_state!r}")

        return self._store._activate(node, reducer, initial_state)  # noqa: SLF001


class MountedStore:
    """Handle on a mounted node.

    Exposes the store API scoped to the node: ``get_state`` returns the
    node's merged state, ``mount``/``unmount`` take paths relative to the
    node. Every method raises :class:`MountUsageError` once the node has
    been unmounted.
    """

    def __init__(self, store: MountableStore, node: MountNode) -> None:
        self._store = store
        self._node = node

    @property
    def path(self) -> str:
        return self._node.full_path

    @property
    def is_mounted(self) -> bool:
        return self._store.is_mounted(self._node)

    def _check_mounted(self) -> None:
        if not self.is_mounted:
            raise MountUsageError(f"Store at {self.path!r} is no longer mounted")

    def get_state(self) -> dict[str, Any] | None:
        self._check_mounted()
        return self._node.cache.merged_state

    def dispatch(self, action: Any) -> Action:
        self._check_mounted()
        return self._store.dispatch(action)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._check_mounted()
        return self._store.subscribe(listener)

    def replace_reducer(self, next_reducer: Reducer) -> None:
        self._check_mounted()
        if not callable(next_reducer):
            raise MountConfigError("Expected the next reducer to be callable.")
        previous, self._node.reducer = self._node.reducer, next_reducer
        try:
            self._store.dispatch(init_action(self.path))
        except Exception:
            self._node.reducer = previous
            raise

    def mount(self, path: str, viewed_state_spec: Mapping[str, Any] | None = None) -> MountedStoreCreator:
        self._check_mounted()
        return self._store._mount(self.path, path, viewed_state_spec)  # noqa: SLF001

    def unmount(self, path: str) -> None:
        self._check_mounted()
        self._store._unmount(self.path, path)  # noqa: SLF001

    def query(self, query: Mapping[str, str]) -> Action:
        """Ask for extra viewed state: ``{alias: dotted_source_path}``."""
        self._check_mounted()
        return self.dispatch(query_action(self.path, query))


def create_mountable_store(
    reducer: Reducer,
    initial_state: Any = None,
    enhancer: Enhancer | None = None,
    *,
    config: MountStoreConfig | None = None,
    store_factory: StoreCreator = create_store,
) -> Any:
    """Create a :class:`MountableStore`, optionally through a store *enhancer*.

    The enhancer receives this function (with *config* and *store_factory*
    bound) and its result is called with ``(reducer, initial_state)``.
    """
    if enhancer is not None:
        if not callable(enhancer):
            raise MountConfigError("Expected the enhancer to be callable.")
        create = functools.partial(create_mountable_store, config=config, store_factory=store_factory)
        return enhancer(create)(reducer, initial_state)
    return MountableStore(reducer, initial_state, config=config, store_factory=store_factory)


def mountable(store_factory: StoreCreator = create_store, *, config: MountStoreConfig | None = None) -> StoreCreator:
    """Store enhancer making stores built by *store_factory* mountable.

    ``create_store(reducer, state, mountable)`` is equivalent to
    ``create_mountable_store(reducer, state)``.
    """
    return functools.partial(create_mountable_store, config=config, store_factory=store_factory)
