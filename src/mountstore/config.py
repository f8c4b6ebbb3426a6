"""Store configuration for mountstore."""

from __future__ import annotations

import dataclasses
import os
from typing import Any, Literal

from mountstore.exceptions import MountConfigError

QuerySource = Literal["root", "host"]

_QUERY_SOURCES: frozenset[str] = frozenset({"root", "host"})


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class MountStoreConfig:
    """Mountable store configuration.

    Parameters
    ----------
    trace_enabled : bool
        Log every dispatched action (type and summarized payload) at
        DEBUG level on the ``mountstore.mountable`` logger.
    trace_max_string : int
        Strings longer than this are truncated in trace output.
    trace_max_items : int
        Mappings and sequences longer than this are truncated in trace
        output.
    query_source : {"root", "host"}
        What bindings added by a QUERY resolve against. ``"root"`` (the
        default) reads the root state, skipping any narrowing applied by
        the host's own reducer. ``"host"`` reads the host's merged state,
        the same source statically declared viewed state uses.
    """

    trace_enabled: bool = False
    trace_max_string: int = 256
    trace_max_items: int = 20
    query_source: QuerySource = "root"

    def __post_init__(self) -> None:
        if self.query_source not in _QUERY_SOURCES:
            raise MountConfigError(
                f"query_source must be one of {sorted(_QUERY_SOURCES)}, got {self.query_source!r}"
            )
        if self.trace_max_string <= 0 or self.trace_max_items <= 0:
            raise MountConfigError("trace limits must be positive")

    @classmethod
    def from_env(cls, **overrides: Any) -> MountStoreConfig:
        """Create configuration from ``MOUNTSTORE_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        if "trace_enabled" not in overrides:
            config_kwargs["trace_enabled"] = _env_bool(env.get("MOUNTSTORE_TRACE_ENABLED"), False)

        max_string_env = env.get("MOUNTSTORE_TRACE_MAX_STRING")
        if max_string_env is not None and "trace_max_string" not in overrides:
            config_kwargs["trace_max_string"] = int(max_string_env)

        max_items_env = env.get("MOUNTSTORE_TRACE_MAX_ITEMS")
        if max_items_env is not None and "trace_max_items" not in overrides:
            config_kwargs["trace_max_items"] = int(max_items_env)

        query_source_env = env.get("MOUNTSTORE_QUERY_SOURCE")
        if query_source_env is not None and "query_source" not in overrides:
            config_kwargs["query_source"] = query_source_env.strip().lower()

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
