from __future__ import annotations

import pytest

from mountstore.exceptions import MountConfigError
from mountstore.paths import MISSING, get_in, is_within, join_path, normalize_path, path_depth


def test_normalize_path_splits_dotted_strings() -> None:
    assert normalize_path("a.b.c") == ("a", "b", "c")
    assert normalize_path("") == ()
    assert normalize_path(["a", 0]) == ("a", "0")


@pytest.mark.parametrize("path", [None, 5, {"a": 1}, True])
def test_normalize_path_rejects_other_types(path: object) -> None:
    with pytest.raises(MountConfigError):
        normalize_path(path)  # type: ignore[arg-type]


def test_get_in_walks_mappings_and_lists() -> None:
    tree = {"a": [{"b": 1}, {"b": None}]}

    assert get_in(tree, "a.0.b") == 1
    assert get_in(tree, "a.1.b") is None
    assert get_in(tree, "a.2.b") is MISSING
    assert get_in(tree, "a.x") is MISSING
    assert get_in(tree, "a.0.b.c", default="fallback") == "fallback"
    assert get_in(None, "a") is MISSING
    assert not MISSING


def test_ancestry_helpers() -> None:
    assert join_path(None, "a.b") == "a.b"
    assert join_path("host", "child") == "host.child"
    assert path_depth("host.child.grandChild") == 3
    assert is_within("host.child", "host")
    assert is_within("host", "host")
    assert not is_within("hostel", "host")
    assert not is_within("host", "host.child")
