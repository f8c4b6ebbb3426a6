"""Helpers for bounded debug logging.

State trees can be arbitrarily large and viewed state specs hold callables.
This module turns actions and state into small, printable summaries before
they are emitted in DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel

_MAX_DEPTH = 6


def summarize_for_log(
    value: Any,
    *,
    max_string: int = 256,
    max_items: int = 20,
    _depth: int = 0,
) -> Any:
    """Return a truncated copy of *value* suitable for debug logs."""
    if _depth > _MAX_DEPTH:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, BaseModel):
        value = value.model_dump()

    if isinstance(value, Mapping):
        summary: dict[str, Any] = {}
        for index, (k, v) in enumerate(value.items()):
            if index >= max_items:
                summary["…"] = f"<{len(value) - max_items} more>"
                break
            summary[str(k)] = summarize_for_log(
                v, max_string=max_string, max_items=max_items, _depth=_depth + 1
            )
        return summary

    if isinstance(value, Sequence) and not isinstance(value, bytearray):
        items = [
            summarize_for_log(v, max_string=max_string, max_items=max_items, _depth=_depth + 1)
            for v in value[:max_items]
        ]
        if len(value) > max_items:
            items.append(f"<{len(value) - max_items} more>")
        return items

    if callable(value):
        return f"<callable {getattr(value, '__qualname__', type(value).__name__)}>"

    # Fallback: represent unknown objects without dumping internals.
    return repr(value)
