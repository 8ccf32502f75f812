"""Domain Types: identity, view and link-value types shared across the render pipeline.

Invariants:
    - EntityRef (type_handle, entity_id) is the unique identity of an entity in one render
    - ViewRecord is immutable once built; `data` is never interpreted by the core
    - Value / Deferred are the only wrappers a link declaration may use
    - Whitelist is either None (include everything non-deferred) or a frozenset

Design Decisions:
    - NewType for TypeHandle: zero runtime cost, handles stay plain str for logging and JSON
    - NamedTuple for EntityRef and CacheKey: hashable, usable directly as set members and dict keys
    - str Enum for CacheOperation: cache keys stay readable in logs
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Generic, NamedTuple, NewType, TypeVar, Union


# ─── Identity Types ──────────────────────────────────────────────

TypeHandle = NewType("TypeHandle", str)
EntityId = Union[int, str, tuple]

Whitelist = frozenset[TypeHandle] | None


class EntityRef(NamedTuple):
    """Identity of one entity across the whole link graph."""
    type_handle: TypeHandle
    entity_id: EntityId


class CacheOperation(str, Enum):
    """Kind of memoized operation; part of every cache key."""
    GET = "get"


class CacheKey(NamedTuple):
    """Key of one memoized fetch inside a cache context."""
    type_handle: TypeHandle
    operation: CacheOperation
    entity_id: EntityId


# ─── View Types ──────────────────────────────────────────────────

@dataclass(frozen=True)
class ViewRecord:
    """Finalized output node for one entity."""
    id: Any
    type: TypeHandle
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def ref(self) -> tuple[TypeHandle, Any]:
        return (self.type, self.id)

    def to_dict(self) -> dict:
        return {"id": self.id, "type": self.type, "data": self.data}


# ─── Link Values ─────────────────────────────────────────────────

V = TypeVar("V")


@dataclass(frozen=True)
class Value(Generic[V]):
    """An eagerly available link value (id, entity-data, or a list of either)."""
    value: V


@dataclass(frozen=True)
class Deferred(Generic[V]):
    """A link value computed only when the active whitelist selects its type."""
    producer: Callable[[], V]

    def evaluate(self) -> V:
        return self.producer()


class _NotLoaded:
    """Marker for an association that was never loaded from storage."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_LOADED"

    def __bool__(self) -> bool:
        return False


NOT_LOADED = _NotLoaded()


def data_or_id(association: Any, fallback_id: Any) -> Any:
    """Return the loaded association, or fall back to its id when not loaded."""
    if association is None or association is NOT_LOADED:
        return fallback_id
    return association


# ─── Identifier Decoding ─────────────────────────────────────────

@dataclass(frozen=True)
class DecodeResult:
    """Outcome of decoding an obfuscated identifier: a value or a reason string."""
    value: Any = None
    reason: str | None = None

    @property
    def is_ok(self) -> bool:
        return self.reason is None

    @classmethod
    def ok(cls, value: Any) -> "DecodeResult":
        return cls(value=value)

    @classmethod
    def error(cls, reason: str) -> "DecodeResult":
        return cls(reason=reason)
