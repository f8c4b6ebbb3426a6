"""Batched copy-on-write editor for nested dict/list trees.

A transaction never mutates its source. Each edit clones only the
containers along the edited path (once per transaction), so every subtree
the edits do not touch keeps its original identity in the committed result.
This is what lets consumers compare states with ``is``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from mountstore.exceptions import MountConfigError, MountDataError, TransactionCommittedError
from mountstore.paths import MISSING, SEPARATOR, PathLike, get_child, get_in, list_index, normalize_path


def _shallow_clone(value: Any) -> dict[str, Any] | list[Any]:
    if isinstance(value, list):
        return list(value)
    if isinstance(value, Mapping):
        return dict(value)
    # Missing segments and scalar leaves become empty mappings.
    return {}


def _index_or_raise(segment: str) -> int:
    index = list_index(segment)
    if index is None:
        raise MountDataError(f"Cannot use {segment!r} as a list index")
    return index


def _put(container: dict[str, Any] | list[Any], segment: str, value: Any) -> None:
    if isinstance(container, dict):
        container[segment] = value
        return
    index = _index_or_raise(segment)
    if index < len(container):
        container[index] = value
    else:
        container.extend([None] * (index - len(container)))
        container.append(value)


def _remove(container: dict[str, Any] | list[Any], segment: str) -> None:
    if isinstance(container, dict):
        del container[segment]
    else:
        del container[_index_or_raise(segment)]


class Transaction:
    """Structural-sharing editor over a plain nested tree.

    Mutators return the transaction so edits can be chained::

        new_state = Transaction(state).set("a.b", 1).delete("c").commit()

    After :meth:`commit` the transaction is spent; any further call raises
    :class:`TransactionCommittedError`.
    """

    def __init__(self, source: Mapping[str, Any]) -> None:
        if not isinstance(source, Mapping):
            raise MountConfigError(f"Source must be a mapping. Got {source!r}")
        self._result: dict[str, Any] = dict(source)
        # Containers cloned by this transaction, keyed by id and kept alive so
        # ids cannot be recycled. Anything else reachable from the result is
        # shared with the source or was handed in by the caller.
        self._owned: dict[int, Any] = {id(self._result): self._result}
        self._committed = False

    @property
    def committed(self) -> bool:
        return self._committed

    def _check_open(self, operation: str) -> None:
        if self._committed:
            raise TransactionCommittedError(f"Cannot call `{operation}` on a committed transaction")

    def _ensure_cloned(self, segments: tuple[str, ...]) -> Any:
        """Make every container along *segments* private to this transaction."""
        dest: Any = self._result
        for segment in segments:
            child = get_child(dest, segment)
            if id(child) not in self._owned:
                child = _shallow_clone(child)
                self._owned[id(child)] = child
                _put(dest, segment, child)
            dest = child
        return dest

    def set(self, path: PathLike, value: Any) -> Transaction:
        self._check_open("set")
        segments = normalize_path(path)
        if not segments:
            raise MountConfigError("Cannot set the root of a transaction")
        parent = self._ensure_cloned(segments[:-1])
        _put(parent, segments[-1], value)
        return self

    def delete(self, path: PathLike) -> Transaction:
        """Remove the value at *path*; deleting a missing path is a no-op."""
        self._check_open("delete")
        segments = normalize_path(path)
        if not segments:
            raise MountConfigError("Cannot delete the root of a transaction")
        if get_in(self._result, segments) is MISSING:
            return self
        parent = self._ensure_cloned(segments[:-1])
        _remove(parent, segments[-1])
        return self

    def append(self, path: PathLike, value: Any) -> Transaction:
        """Push *value* onto the list at *path*, creating the list if absent."""
        self._check_open("append")
        segments = normalize_path(path)
        current = get_in(self._result, segments)
        if current is MISSING or current is None:
            return self.set(segments, [value])
        if not isinstance(current, list):
            raise MountDataError(f"Cannot append to non-list value at {SEPARATOR.join(segments)!r}")
        self._ensure_cloned(segments).append(value)
        return self

    def assign_keys(self, path: PathLike, values: Mapping[str, Any]) -> Transaction:
        """Set every key of *values* beneath *path* (``""`` targets the root)."""
        self._check_open("assign_keys")
        if not isinstance(values, Mapping):
            raise MountConfigError(f"assign_keys expects a mapping, got {values!r}")
        segments = normalize_path(path)
        for key, value in values.items():
            self.set((*segments, key), value)
        return self

    def commit(self) -> dict[str, Any]:
        self._check_open("commit")
        self._committed = True
        self._owned.clear()
        return self._result


create_transaction = Transaction


def set_in(tree: Mapping[str, Any] | None, path: PathLike, value: Any) -> dict[str, Any]:
    """One-shot structural-sharing set; ``None`` is treated as an empty tree."""
    return Transaction({} if tree is None else tree).set(path, value).commit()


def delete_in(tree: Mapping[str, Any] | None, path: PathLike) -> dict[str, Any]:
    """One-shot structural-sharing delete; ``None`` is treated as an empty tree."""
    return Transaction({} if tree is None else tree).delete(path).commit()
