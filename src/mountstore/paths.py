"""Dotted-path helpers shared by the transaction and the mount registry.

Paths are either dot-delimited strings (``"animal.raccoon.isCute"``) or
sequences of segments. Only dicts and lists are traversed; list segments
are integer indices.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Final

from mountstore.exceptions import MountConfigError

PathLike = str | list[Any] | tuple[Any, ...]

SEPARATOR: Final = "."


class _Missing:
    """Marker for "no value at this path" (``None`` is a legitimate value)."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()


def normalize_path(path: PathLike) -> tuple[str, ...]:
    """Return *path* as a tuple of string segments."""
    if isinstance(path, str):
        if not path:
            return ()
        return tuple(path.split(SEPARATOR))
    if isinstance(path, (list, tuple)):
        return tuple(str(segment) for segment in path)
    raise MountConfigError(f"Expected a dotted string or a sequence path, got {path!r}")


def list_index(segment: str) -> int | None:
    """Parse *segment* as a list index, or ``None`` if it is not one."""
    try:
        index = int(segment)
    except ValueError:
        return None
    if index < 0:
        return None
    return index


def get_child(container: Any, segment: str) -> Any:
    if isinstance(container, Mapping):
        return container.get(segment, MISSING)
    if isinstance(container, list):
        index = list_index(segment)
        if index is None or index >= len(container):
            return MISSING
        return container[index]
    return MISSING


def get_in(tree: Any, path: PathLike, default: Any = MISSING) -> Any:
    """Read the value at *path*, or *default* when any segment is absent."""
    node = tree
    for segment in normalize_path(path):
        node = get_child(node, segment)
        if node is MISSING:
            return default
    return node


def join_path(host: str | None, path: str) -> str:
    if host is None:
        return path
    return f"{host}{SEPARATOR}{path}"


def path_depth(path: str) -> int:
    return len(normalize_path(path))


def is_within(path: str, ancestor: str) -> bool:
    """True when *path* equals *ancestor* or is mounted somewhere beneath it."""
    segments = normalize_path(path)
    prefix = normalize_path(ancestor)
    return segments[: len(prefix)] == prefix
