"""Registry of mounted paths.

Each mountable store owns exactly one registry. A path is either
registered or absent: unmounting removes the entry outright, so a freed
path is indistinguishable from one that was never used.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

from mountstore.actions import Action
from mountstore.exceptions import MountConfigError, MountConflictError
from mountstore.paths import MISSING, get_in, is_within, join_path, path_depth

Resolver = Callable[[Any], Any]
MountReducer = Callable[[Any, Action], Any]


@dataclass
class MountCache:
    """Last state observed for a node.

    ``merged_state`` is what the node's ``get_state`` returns; it only gets a
    new identity when ``own_state`` or one of the viewed values changes.
    """

    own_state: Any = None
    viewed_state: dict[str, Any] | None = None
    merged_state: dict[str, Any] | None = None


@dataclass
class MountNode:
    path: str
    full_path: str
    host: str | None
    viewed_state_spec: dict[str, Resolver]
    reducer: MountReducer | None = None
    cache: MountCache = field(default_factory=MountCache)

    @property
    def active(self) -> bool:
        """False until the node's store creator has attached a reducer."""
        return self.reducer is not None


class MountRegistry:
    """Maps canonical (full, dotted) mount paths to their nodes."""

    def __init__(self) -> None:
        self._nodes: dict[str, MountNode] = {}

    def __contains__(self, full_path: object) -> bool:
        return full_path in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._nodes))

    def register(
        self,
        path: str,
        host: str | None,
        viewed_state_spec: dict[str, Resolver],
        *,
        state: Any = None,
    ) -> MountNode:
        """Create the node for *path* beneath *host*.

        *state* is the current root state, checked so a mount never
        silently adopts state that something else put at the same path.
        """
        if not isinstance(path, str) or not path:
            raise MountConfigError(f"Expected a non-empty string mount path, got {path!r}")

        full_path = join_path(host, path)
        if full_path in self._nodes:
            raise MountConflictError(f'Mount already exists at path "{path}" on "{host}"', path=full_path)

        existing = get_in(state, full_path)
        if existing is not MISSING and existing is not None:
            raise MountConflictError(f'State exists at mount path "{path}" on "{host}"', path=full_path)

        node = MountNode(
            path=path,
            full_path=full_path,
            host=host,
            viewed_state_spec=viewed_state_spec,
        )
        self._nodes[full_path] = node
        return node

    def lookup(self, full_path: str) -> MountNode | None:
        return self._nodes.get(full_path)

    def unregister(self, full_path: str) -> MountNode | None:
        return self._nodes.pop(full_path, None)

    def ordered_paths(self) -> list[str]:
        """All paths, shallowest first; ancestors always precede descendants."""
        return sorted(self._nodes, key=path_depth)

    def ordered_nodes(self) -> list[MountNode]:
        return [self._nodes[full_path] for full_path in self.ordered_paths()]

    def subtree(self, full_path: str) -> list[str]:
        """*full_path* and every path mounted beneath it, deepest first."""
        within = [key for key in self._nodes if is_within(key, full_path)]
        return sorted(within, key=path_depth, reverse=True)

    def snapshot(self) -> dict[str, MountNode]:
        return dict(self._nodes)

    def restore(self, nodes: dict[str, MountNode]) -> None:
        """Put back exactly the nodes returned by an earlier :meth:`snapshot`."""
        self._nodes = dict(nodes)
