"""Result Collector: flattening, first-wins dedup, final whitelist pass."""

from sideload.core.domain_types import ViewRecord
from sideload.core.result_collector import collect_records


def _rec(type_handle, entity_id, **data):
    return ViewRecord(id=entity_id, type=type_handle, data=data)


def test_flattens_nested_lists_and_drops_none():
    records = [_rec("user", 1), [None, [_rec("team", 10)], (_rec("post", 5),)], None]
    collected = collect_records(records)
    assert [(r.type, r.id) for r in collected] == [("user", 1), ("team", 10), ("post", 5)]


def test_dedup_keeps_first_occurrence_and_order():
    first = _rec("user", 1, name="first")
    later = _rec("user", 1, name="later")
    collected = collect_records([first, _rec("team", 10), later, _rec("team", 10)])
    assert collected == [first, _rec("team", 10)]
    assert collected[0].data["name"] == "first"


def test_same_id_different_types_are_distinct():
    collected = collect_records([_rec("user", 1), _rec("team", 1)])
    assert len(collected) == 2


def test_empty_whitelist_yields_nothing():
    assert collect_records([_rec("user", 1)], frozenset()) == []


def test_absent_whitelist_returns_everything():
    records = [_rec("user", 1), _rec("team", 2)]
    assert collect_records(records, None) == records


def test_whitelist_keeps_member_types_only():
    records = [_rec("user", 1), _rec("team", 2), _rec("post", 3)]
    collected = collect_records(records, frozenset({"user", "post"}))
    assert [r.type for r in collected] == ["user", "post"]


def test_empty_input():
    assert collect_records([]) == []
