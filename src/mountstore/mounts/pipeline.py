"""Reduction pipeline.

:class:`ReductionPipeline` is the reducer a mountable store hands to its
base store. For every action it runs the root reducer, applies the mount
lifecycle (MOUNT, UNMOUNT, QUERY_RESULT), then walks the mounted reducers
ancestors first and writes their own state back into the root tree.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping
from typing import Any

from mountstore.actions import Action, MountAction, QueryResultAction, UnmountAction
from mountstore.config import MountStoreConfig
from mountstore.exceptions import MountDataError, MountUsageError
from mountstore.mounts.registry import MountCache, MountNode, MountRegistry, Resolver
from mountstore.mounts.viewed import merge_state, query_resolver, refresh, strip_viewed_keys
from mountstore.paths import get_in
from mountstore.store import Reducer
from mountstore.transaction import delete_in, set_in

_logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class _Checkpoint:
    """Mount bookkeeping as it was before an action started reducing."""

    root_state: Any
    nodes: dict[str, MountNode]
    caches: dict[str, MountCache]
    specs: dict[str, dict[str, Resolver]]


class ReductionPipeline:
    """Root reducer wrapper that drives every mounted node."""

    def __init__(
        self,
        reducer: Reducer,
        registry: MountRegistry,
        *,
        config: MountStoreConfig,
    ) -> None:
        self.reducer = reducer
        self._registry = registry
        self._config = config
        self._root_state: Any = None

    @property
    def root_state(self) -> Any:
        """Output of the root reducer for the action being (or last) reduced."""
        return self._root_state

    def host_state(self, node: MountNode) -> Any:
        """The state *node*'s viewed state spec resolves against."""
        if node.host is None:
            return self._root_state
        host = self._registry.lookup(node.host)
        return host.cache.merged_state if host is not None else None

    def refresh_node(self, node: MountNode, state: Any) -> bool:
        own_state = strip_viewed_keys(get_in(state, node.full_path, None), node.viewed_state_spec)
        return refresh(node, own_state, self.host_state(node))

    def __call__(self, state: Any, action: Action) -> Any:
        checkpoint = self._checkpoint()
        try:
            return self._reduce(state, action)
        except Exception:
            self._rollback(checkpoint)
            raise

    def _checkpoint(self) -> _Checkpoint:
        nodes = self._registry.snapshot()
        return _Checkpoint(
            root_state=self._root_state,
            nodes=nodes,
            caches={path: dataclasses.replace(node.cache) for path, node in nodes.items()},
            specs={path: node.viewed_state_spec for path, node in nodes.items()},
        )

    def _rollback(self, checkpoint: _Checkpoint) -> None:
        self._root_state = checkpoint.root_state
        self._registry.restore(checkpoint.nodes)
        for path, node in checkpoint.nodes.items():
            node.cache = checkpoint.caches[path]
            node.viewed_state_spec = checkpoint.specs[path]
        _logger.debug("Rolled back mount caches after a failed reduction")

    def _reduce(self, state: Any, action: Action) -> Any:
        new_state = self.reducer(state, action)
        self._root_state = new_state

        if isinstance(action, MountAction):
            # The node's own reducer does not see the action that mounted it.
            return self._mount(new_state, action)
        if isinstance(action, UnmountAction):
            new_state = self._unmount(new_state, action)
        elif isinstance(action, QueryResultAction):
            self._merge_query_result(action)

        nodes = [node for node in self._registry.ordered_nodes() if node.active]
        for node in nodes:
            self.refresh_node(node, new_state)
            new_state = self._reduce_node(node, new_state, action)

        # Later nodes may have moved state that earlier nodes view.
        for node in nodes:
            self.refresh_node(node, new_state)

        return new_state

    def _mount(self, state: Any, action: MountAction) -> Any:
        path = action.payload.path
        node = self._registry.lookup(path)
        if node is None:
            raise MountUsageError(f"No such mount {path}")

        own_state = strip_viewed_keys(action.payload.initial_state, node.viewed_state_spec)
        state = set_in(state, path, own_state)
        refresh(node, own_state, self.host_state(node))
        _logger.debug("Mounted %s with viewed state %s", path, sorted(node.viewed_state_spec))
        return state

    def _unmount(self, state: Any, action: UnmountAction) -> Any:
        path = action.payload.path
        if isinstance(state, Mapping):
            state = delete_in(state, path)
        self._registry.unregister(path)
        _logger.debug("Unmounted %s", path)
        return state

    def _merge_query_result(self, action: QueryResultAction) -> None:
        path = action.payload.path
        node = self._registry.lookup(path)
        if node is None:
            raise MountUsageError(f"No such mount {path}")

        # Query bindings read the root state unless configured to read the
        # host's merged state like statically declared viewed state does.
        read_root = (lambda: self._root_state) if self._config.query_source == "root" else None
        bindings = {
            alias: query_resolver(source, read_root) for alias, source in action.payload.result.items()
        }
        node.viewed_state_spec = {**node.viewed_state_spec, **bindings}
        _logger.debug(
            "Bound %s for %s against %s state", sorted(bindings), path, self._config.query_source
        )

    def _reduce_node(self, node: MountNode, state: Any, action: Action) -> Any:
        cache = node.cache
        assert node.reducer is not None  # noqa: S101
        result = node.reducer(cache.merged_state, action)
        if result is cache.merged_state:
            return state

        if not isinstance(result, Mapping):
            raise MountDataError(
                f"Reducer mounted at {node.full_path} returned {type(result).__name__}, expected a mapping"
            )

        own_state = strip_viewed_keys(result, node.viewed_state_spec)
        cache.own_state = own_state
        cache.merged_state = merge_state(own_state, cache.viewed_state or {})
        return set_in(state, node.full_path, own_state)
