"""Result Collector: flatten, deduplicate and whitelist-filter walker output.

Invariants:
    - Output never contains two records with equal (type, id)
    - First occurrence wins; first-seen order is preserved
    - None entries are dropped at any nesting depth
    - Whitelist empty -> []; None -> unfiltered; non-empty -> member types only

Design Decisions:
    - Second whitelist pass independent of the traversal-time filter in link_filter.py:
      records from any producer are bounded by the include list before leaving the core
"""

from typing import Any, Iterable, Iterator

from sideload.core.domain_types import ViewRecord, Whitelist
from sideload.core.link_filter import allows


def collect_records(records: Iterable[Any], whitelist: Whitelist = None) -> list[ViewRecord]:
    """Flatten nested record lists into one deduplicated, whitelist-filtered list."""
    if whitelist is not None and not whitelist:
        return []
    seen: set[tuple] = set()
    collected: list[ViewRecord] = []
    for record in _flatten(records):
        key = (record.type, record.id)
        if key in seen:
            continue
        seen.add(key)
        collected.append(record)
    return [r for r in collected if allows(whitelist, r.type)]


def _flatten(items: Iterable[Any]) -> Iterator[ViewRecord]:
    for item in items:
        if item is None:
            continue
        if isinstance(item, (list, tuple)):
            yield from _flatten(item)
        else:
            yield item
