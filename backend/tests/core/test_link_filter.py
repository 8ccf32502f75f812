"""Link Filter: whitelist rules, Deferred/Value handling, normalization helpers."""

from enum import Enum

from sideload.core.domain_types import Deferred, Value
from sideload.core.link_filter import (
    allows, filter_links, normalize_link_value, normalize_whitelist,
)
from sideload.core.view_declarator import ViewDeclarator


class Kind(str, Enum):
    USER = "user"
    TEAM = "team"


def _exploding():
    raise AssertionError("deferred value must not be evaluated")


def test_none_whitelist_keeps_values_and_drops_deferred():
    declared = {"user": 1, "team": Deferred(_exploding), "post": Value([3, 4])}
    assert filter_links(declared, None) == [("user", 1), ("post", [3, 4])]


def test_empty_whitelist_drops_everything():
    declared = {"user": 1, "team": Deferred(_exploding)}
    assert filter_links(declared, frozenset()) == []


def test_non_empty_whitelist_selects_and_evaluates():
    declared = {
        "user": 1,
        "team": Deferred(lambda: Value([10, 20])),
        "post": Deferred(_exploding),
    }
    assert filter_links(declared, frozenset({"team", "user"})) == [
        ("user", 1), ("team", [10, 20]),
    ]


def test_no_declaration_yields_empty():
    assert filter_links(None, None) == []
    assert filter_links({}, frozenset({"user"})) == []


def test_declarator_keys_matched_by_type_name():
    team = ViewDeclarator("team", get=lambda i: None, view=lambda t: {})
    assert filter_links({team: 5}, frozenset({"team"})) == [(team, 5)]


def test_normalize_link_value():
    assert normalize_link_value(None) == []
    assert normalize_link_value(7) == [7]
    assert normalize_link_value({"id": 1}) == [{"id": 1}]
    assert normalize_link_value((1, None, 2)) == [1, 2]


def test_normalize_link_value_expands_id_collections():
    assert normalize_link_value(range(1, 3)) == [1, 2]
    assert sorted(normalize_link_value({3, None, 4})) == [3, 4]
    assert normalize_link_value(i for i in (5, 6)) == [5, 6]
    assert normalize_link_value("u-1") == ["u-1"]


def test_normalize_whitelist():
    team = ViewDeclarator("team", get=lambda i: None, view=lambda t: {})
    assert normalize_whitelist(None) is None
    assert normalize_whitelist([]) == frozenset()
    assert normalize_whitelist(["user", Kind.TEAM, team]) == frozenset({"user", "team"})
    assert normalize_whitelist("user") == frozenset({"user"})


def test_allows():
    assert allows(None, "user")
    assert allows(frozenset({"user"}), "user")
    assert not allows(frozenset({"user"}), "team")
    assert not allows(frozenset(), "user")
