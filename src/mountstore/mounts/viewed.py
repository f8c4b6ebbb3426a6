"""Viewed state resolution and per-node cache refresh.

A node's viewed state is computed from its host's merged state (or the
root state for nodes mounted on the root) through the resolvers in its
viewed state spec. The cache keeps the last own, viewed and merged state
so that ``get_state`` returns the very same object until something the
node can observe actually changes.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from mountstore.exceptions import MountConfigError, MountDataError
from mountstore.mounts.registry import MountNode, Resolver
from mountstore.paths import MISSING, SEPARATOR, PathLike, get_child, get_in, normalize_path
from mountstore.transaction import Transaction

_VALUE_TYPES = (str, bytes, int, float, complex)


def same_value(left: Any, right: Any) -> bool:
    """Identity for containers, equality for immutable scalars."""
    if left is right:
        return True
    return type(left) is type(right) and isinstance(left, _VALUE_TYPES) and left == right


def _source_label(source: PathLike) -> str:
    return source if isinstance(source, str) else SEPARATOR.join(str(s) for s in source)


def path_resolver(alias: str, source: PathLike) -> Resolver:
    """Resolver reading *source* off the host state; a missing value is fatal."""
    segments = normalize_path(source)
    label = _source_label(source)

    def resolve(host_state: Any) -> Any:
        value = get_in(host_state, segments)
        if value is MISSING:
            raise MountDataError(
                f'Could not resolve data from "{label}" for "{alias}"',
                key=alias,
                source=label,
            )
        return value

    return resolve


def query_resolver(source: PathLike, read_root: Callable[[], Any] | None = None) -> Resolver:
    """Resolver for a binding added by a QUERY.

    With *read_root* the binding reads the root state and ignores the host
    state it is handed. Unresolved sources resolve to ``None``.
    """
    segments = normalize_path(source)

    def resolve(host_state: Any) -> Any:
        state = read_root() if read_root is not None else host_state
        return get_in(state, segments, None)

    return resolve


def normalize_viewed_state_spec(spec: Mapping[str, Any] | None) -> dict[str, Resolver]:
    """Turn dotted-path entries of *spec* into resolvers; callables are kept."""
    if spec is None:
        return {}
    if not isinstance(spec, Mapping):
        raise MountConfigError(f"Expected the viewed state spec to be omitted or a mapping, got {spec!r}")

    normalized: dict[str, Resolver] = {}
    for alias, mapping in spec.items():
        if not isinstance(alias, str):
            raise MountConfigError(f"Viewed state aliases must be strings, got {alias!r}")
        if callable(mapping):
            normalized[alias] = mapping
        elif isinstance(mapping, (str, list, tuple)):
            normalized[alias] = path_resolver(alias, mapping)
        else:
            raise MountConfigError(
                f"Viewed state for {alias!r} must be a dotted path or a callable, got {mapping!r}"
            )
    return normalized


def compute_viewed_state(node: MountNode, host_state: Any) -> dict[str, Any]:
    """Return the node's viewed state, reusing the cached object if nothing moved.

    The cache itself is left untouched.
    """
    cached = node.cache.viewed_state
    viewed: dict[str, Any] = cached if cached is not None else {}
    transaction: Transaction | None = None

    for alias, resolver in node.viewed_state_spec.items():
        value = resolver(host_state)
        if not same_value(get_child(viewed, alias), value):
            if transaction is None:
                transaction = Transaction(viewed)
            transaction.set((alias,), value)

    return transaction.commit() if transaction is not None else viewed


def merge_state(own_state: Any, viewed_state: Mapping[str, Any]) -> dict[str, Any]:
    """Overlay *own_state* on *viewed_state*; own keys win on collision."""
    merged = dict(viewed_state)
    if isinstance(own_state, Mapping):
        merged.update(own_state)
    return merged


def strip_viewed_keys(state: Any, viewed_state_spec: Mapping[str, Resolver]) -> Any:
    """Drop viewed aliases from *state*; returns *state* itself if none are present."""
    if not isinstance(state, Mapping) or not any(alias in state for alias in viewed_state_spec):
        return state
    return {key: value for key, value in state.items() if key not in viewed_state_spec}


def refresh(node: MountNode, own_state: Any, host_state: Any) -> bool:
    """Bring the node's cache up to date; returns whether it changed."""
    cache = node.cache
    viewed = compute_viewed_state(node, host_state)
    if own_state is cache.own_state and viewed is cache.viewed_state:
        return False

    cache.own_state = own_state
    cache.viewed_state = viewed
    cache.merged_state = merge_state(own_state, viewed)
    return True
