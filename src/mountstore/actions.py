"""Action model.

Every dispatched action is converted into one of a closed set of frozen
pydantic models: the five lifecycle variants understood by the mount
pipeline plus :class:`AppAction`, an opaque carrier for application
actions. Reducers always receive these models, never raw mappings.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError

from mountstore.exceptions import MountConfigError


class ActionType(StrEnum):
    MOUNT = "@@mountstore/MOUNT"
    UNMOUNT = "@@mountstore/UNMOUNT"
    INIT = "@@mountstore/INIT"
    QUERY = "@@mountstore/QUERY"
    QUERY_RESULT = "@@mountstore/QUERY_RESULT"


class Action(BaseModel):
    """Base class of every action a store can reduce."""

    model_config = ConfigDict(frozen=True)

    type: str


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class MountPayload(_Payload):
    path: StrictStr
    initial_state: Any = None


class PathPayload(_Payload):
    path: StrictStr


class InitPayload(_Payload):
    path: StrictStr | None = None


class QueryPayload(_Payload):
    path: StrictStr
    query: dict[StrictStr, StrictStr] = Field(..., description="alias -> dotted source path")


class QueryResultPayload(_Payload):
    path: StrictStr
    result: dict[StrictStr, StrictStr] = Field(..., description="alias -> dotted source path")


class MountAction(Action):
    type: Literal["@@mountstore/MOUNT"] = "@@mountstore/MOUNT"
    payload: MountPayload


class UnmountAction(Action):
    type: Literal["@@mountstore/UNMOUNT"] = "@@mountstore/UNMOUNT"
    payload: PathPayload


class InitAction(Action):
    type: Literal["@@mountstore/INIT"] = "@@mountstore/INIT"
    payload: InitPayload = Field(default_factory=InitPayload)


class QueryAction(Action):
    type: Literal["@@mountstore/QUERY"] = "@@mountstore/QUERY"
    payload: QueryPayload


class QueryResultAction(Action):
    type: Literal["@@mountstore/QUERY_RESULT"] = "@@mountstore/QUERY_RESULT"
    payload: QueryResultPayload


class AppAction(Action):
    """Any action that is not part of the mount lifecycle.

    Extra top-level keys are kept and readable as attributes, so
    ``{"type": "add", "amount": 2}`` arrives as ``action.amount == 2``.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    payload: Any = None


_VARIANTS: dict[str, type[Action]] = {
    ActionType.MOUNT: MountAction,
    ActionType.UNMOUNT: UnmountAction,
    ActionType.INIT: InitAction,
    ActionType.QUERY: QueryAction,
    ActionType.QUERY_RESULT: QueryResultAction,
}


def coerce_action(value: Any) -> Action:
    """Return *value* as an :class:`Action` model.

    Mappings are dispatched on their ``type`` key. Malformed lifecycle
    payloads raise :class:`MountConfigError` immediately.
    """
    if isinstance(value, Action):
        return value
    if not isinstance(value, Mapping):
        raise MountConfigError(f"Actions must be mappings or Action models, got {value!r}")

    action_type = value.get("type")
    if not isinstance(action_type, str):
        raise MountConfigError(f"Actions must have a string 'type', got {action_type!r}")

    model = _VARIANTS.get(action_type, AppAction)
    try:
        return model.model_validate({**value, "type": str(action_type)})
    except ValidationError as exc:
        raise MountConfigError(f"Malformed {action_type} action: {exc}") from exc


def mount_action(path: str, initial_state: Any = None) -> MountAction:
    return MountAction(payload=MountPayload(path=path, initial_state=initial_state))


def unmount_action(path: str) -> UnmountAction:
    return UnmountAction(payload=PathPayload(path=path))


def init_action(path: str | None = None) -> InitAction:
    return InitAction(payload=InitPayload(path=path))


def query_action(path: str, query: Mapping[str, str]) -> QueryAction:
    try:
        return QueryAction(payload=QueryPayload(path=path, query=dict(query)))
    except (TypeError, ValueError) as exc:
        raise MountConfigError(f"Malformed query for {path!r}: {exc}") from exc


def query_result_action(path: str, result: Mapping[str, str]) -> QueryResultAction:
    return QueryResultAction(payload=QueryResultPayload(path=path, result=dict(result)))
