"""Boundary Protocols: contracts between the core walker and the code that supplies entities.

Invariants:
    - Core NEVER imports from infrastructure/ or services/; it sees the cache only as RenderCacheLike
    - EntityDeclarator is implemented by calling code, one instance per entity type
    - get_by_id returns None for a missing entity; it never signals absence by raising
    - IdCodec.decode returns a DecodeResult; failures are values, not exceptions

Design Decisions:
    - Protocol over ABC: structural subtyping, any object with the four methods conforms
    - Sync methods: a traversal runs to completion in one call; only get_by_id may block
"""

from typing import Any, Callable, Mapping, Protocol, TypeVar

from sideload.core.domain_types import CacheKey, DecodeResult, TypeHandle, ViewRecord

T = TypeVar("T")


class EntityDeclarator(Protocol):
    """Per-type contract consumed by the link walker."""
    def get_by_id(self, entity_id: Any) -> Any: ...
    def declare_links(self, data: Any) -> Mapping[Any, Any]: ...
    def prepare_for_view(self, data: Any) -> ViewRecord: ...
    def type_name(self) -> TypeHandle: ...


class RenderCacheLike(Protocol):
    """Memoizing fetch used by the walker; `context` None means no memoization."""
    def fetch(self, context: Any, key: CacheKey, producer: Callable[[], T]) -> T: ...


class IdCodec(Protocol):
    """Identifier obfuscation boundary, implemented outside this package."""
    def encode(self, type_handle: TypeHandle, entity_id: int) -> str: ...
    def decode(self, type_handle: TypeHandle, token: str) -> DecodeResult: ...
