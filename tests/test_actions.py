"""Tests for the action model."""

from __future__ import annotations

import pytest

from mountstore.actions import (
    ActionType,
    AppAction,
    InitAction,
    MountAction,
    QueryAction,
    QueryResultAction,
    UnmountAction,
    coerce_action,
    init_action,
    mount_action,
    query_action,
    query_result_action,
    unmount_action,
)
from mountstore.exceptions import MountConfigError


def test_action_type_values() -> None:
    assert {member.name: member.value for member in ActionType} == {
        "MOUNT": "@@mountstore/MOUNT",
        "UNMOUNT": "@@mountstore/UNMOUNT",
        "INIT": "@@mountstore/INIT",
        "QUERY": "@@mountstore/QUERY",
        "QUERY_RESULT": "@@mountstore/QUERY_RESULT",
    }


def test_application_actions_are_opaque() -> None:
    action = coerce_action({"type": "add", "payload": {"n": 1}, "amount": 2})

    assert isinstance(action, AppAction)
    assert action.type == "add"
    assert action.payload == {"n": 1}
    assert action.amount == 2  # type: ignore[attr-defined]


def test_payload_defaults_to_none() -> None:
    assert coerce_action({"type": "noop"}).payload is None  # type: ignore[attr-defined]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ({"type": ActionType.MOUNT, "payload": {"path": "a", "initial_state": {"x": 1}}}, MountAction),
        ({"type": ActionType.UNMOUNT, "payload": {"path": "a"}}, UnmountAction),
        ({"type": "@@mountstore/INIT"}, InitAction),
        ({"type": ActionType.QUERY, "payload": {"path": "a", "query": {"b": "c.d"}}}, QueryAction),
        ({"type": ActionType.QUERY_RESULT, "payload": {"path": "a", "result": {"b": "c.d"}}}, QueryResultAction),
    ],
)
def test_lifecycle_mappings_select_their_variant(raw: dict, expected: type) -> None:
    assert isinstance(coerce_action(raw), expected)


def test_models_pass_through_unchanged() -> None:
    action = unmount_action("a")
    assert coerce_action(action) is action


def test_factories_match_coerced_mappings() -> None:
    assert mount_action("a", {"x": 1}) == coerce_action(
        {"type": ActionType.MOUNT, "payload": {"path": "a", "initial_state": {"x": 1}}}
    )
    assert init_action().payload.path is None
    assert init_action("a").payload.path == "a"
    assert query_action("a", {"b": "c"}).payload.query == {"b": "c"}
    assert query_result_action("a", {"b": "c"}).payload.result == {"b": "c"}


def test_mount_payload_keeps_initial_state_identity() -> None:
    initial = {"x": 1}
    assert mount_action("a", initial).payload.initial_state is initial


@pytest.mark.parametrize(
    "payload",
    [
        {"query": {}},
        {"path": 123, "query": {}},
        {"path": "foo"},
        {"path": "foo", "query": 123},
        {"path": "foo", "query": None},
    ],
)
def test_malformed_query_raises(payload: dict) -> None:
    with pytest.raises(MountConfigError):
        coerce_action({"type": ActionType.QUERY, "payload": payload})


def test_query_factory_rejects_non_mapping_query() -> None:
    with pytest.raises(MountConfigError):
        query_action("a", 123)  # type: ignore[arg-type]


@pytest.mark.parametrize("raw", [None, "noop", 5, {"payload": 1}, {"type": 5}])
def test_non_actions_raise(raw: object) -> None:
    with pytest.raises(MountConfigError):
        coerce_action(raw)
