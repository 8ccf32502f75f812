"""Link Filter: whitelist pruning and normalization of a raw link declaration.

Invariants:
    - Whitelist None: keep every entry, drop Deferred values WITHOUT calling them
    - Whitelist empty: drop everything
    - Whitelist non-empty: keep member types only, evaluate their Deferred values
    - Output values are always lists; None entries inside them are removed
    - Any id collection (list, tuple, range, set, generator) is expanded; str, mappings
      and entity objects stay single elements
    - Declaration order of the input mapping is preserved

Design Decisions:
    - Deferred is opt-in only: an unrequested join is never executed
    - Value wrappers are unwrapped here so the walker only sees ids and entity-data
"""

from typing import Any, Iterable, Mapping

from sideload.core.declarator_registry import type_handle_of
from sideload.core.domain_types import Deferred, TypeHandle, Value, Whitelist
from sideload.core.entity_identity import is_id_collection


def normalize_whitelist(include: Iterable[Any] | None) -> Whitelist:
    """Turn an include list of handles, enums or declarators into a Whitelist."""
    if include is None:
        return None
    if isinstance(include, (str, bytes)):
        include = [include]
    return frozenset(type_handle_of(item) for item in include)


def filter_links(
    declared: Mapping[Any, Any] | None, whitelist: Whitelist,
) -> list[tuple[Any, Any]]:
    """Apply whitelist rules to a link declaration. Returns (link_key, value) pairs."""
    if not declared:
        return []
    if whitelist is None:
        return [
            (key, _unwrap(value)) for key, value in declared.items()
            if not isinstance(value, Deferred)
        ]
    if not whitelist:
        return []
    return [
        (key, _evaluate(value)) for key, value in declared.items()
        if type_handle_of(key) in whitelist
    ]


def normalize_link_value(value: Any) -> list[Any]:
    """Wrap singletons in a list; expand id collections; drop None elements."""
    if value is None:
        return []
    if is_id_collection(value):
        return [v for v in value if v is not None]
    return [value]


def allows(whitelist: Whitelist, type_handle: TypeHandle) -> bool:
    """Whether records of `type_handle` may be emitted under `whitelist`."""
    return whitelist is None or type_handle in whitelist


def _unwrap(value: Any) -> Any:
    return value.value if isinstance(value, Value) else value


def _evaluate(value: Any) -> Any:
    if isinstance(value, Deferred):
        return _unwrap(value.evaluate())
    return _unwrap(value)
