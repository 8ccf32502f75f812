"""Entity Identity: extract the id of an entity-data object or a bare id scalar.

Invariants:
    - Bare ids are int (bool excluded) or str; everything else is entity-data or nothing
    - Mappings: "id" key wins; otherwise the first (key, value) pair becomes the identity
    - Dataclass instances: `id` field wins; otherwise the first (field, value) pair
    - Other objects: `id` attribute, or no identity at all
    - No identity -> None; callers treat that entity as having no links
    - Fallback identities are always hashable: an unhashable value is replaced by its repr
    - Id collections (sequences, sets, iterators; never str/bytes) are not entity-data

Design Decisions:
    - First-pair fallback kept for id-less mappings and dataclasses so keyed-by-other-field
      records still get a stable identity; each fallback is logged at DEBUG
"""

import dataclasses
import logging
from collections.abc import Iterator, Mapping, Sequence, Set
from typing import Any

from sideload.core.domain_types import EntityId

logger = logging.getLogger(__name__)


def is_id_scalar(value: Any) -> bool:
    """True for values that identify an entity without carrying its data."""
    return isinstance(value, (int, str)) and not isinstance(value, bool)


def is_entity_data(value: Any) -> bool:
    """True for values the walker can render and recurse into directly."""
    if value is None or is_id_scalar(value):
        return False
    if isinstance(value, (bytes, bytearray, float)) or is_id_collection(value):
        return False
    return True


def is_id_collection(value: Any) -> bool:
    """True for link values holding several ids or entities: sequences, sets, iterators."""
    if isinstance(value, (str, bytes, bytearray, Mapping)):
        return False
    return isinstance(value, (Sequence, Set, Iterator))


def extract_identity(data: Any) -> EntityId | None:
    """Identity of a bare id or an entity-data object; None when there is none."""
    if is_id_scalar(data):
        return data
    if isinstance(data, Mapping):
        return _identity_from_mapping(data)
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        return _identity_from_dataclass(data)
    if is_entity_data(data):
        return getattr(data, "id", None)
    return None


def _identity_from_mapping(data: Mapping) -> EntityId | None:
    if "id" in data:
        return data["id"]
    for key, value in data.items():
        logger.debug(
            "Entity mapping has no id key, using first pair",
            extra={"entity_id": repr((key, value))},
        )
        return _fallback_identity(key, value)
    return None


def _identity_from_dataclass(data: Any) -> EntityId | None:
    fields = dataclasses.fields(data)
    if any(f.name == "id" for f in fields):
        return data.id
    if not fields:
        return None
    first = fields[0].name
    value = getattr(data, first)
    logger.debug(
        "Entity dataclass has no id field, using first field",
        extra={"entity_id": repr((first, value))},
    )
    return _fallback_identity(first, value)


def _fallback_identity(key: Any, value: Any) -> tuple:
    try:
        hash(value)
    except TypeError:
        return (key, repr(value))
    return (key, value)
