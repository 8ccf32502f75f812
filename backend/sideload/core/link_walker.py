"""Link Walker: depth-first transitive closure of an entity's declared links.

Invariants:
    - One visited set per top-level walk, shared by every element of a sequence root
    - An EntityRef is recursed into at most once per walk (cycles and diamonds terminate)
    - Ids are resolved ONLY through cache.fetch(context, CacheKey(type, GET, id), ...)
    - Preloaded entity-data is rendered directly; get_by_id is never called for it
    - get_by_id returning None yields no record and no recursion
    - Output order: depth-first, declaration order at each entity
    - Root entities are marked visited but never emitted as link records
    - Exceptions raised by declarators propagate unchanged

Design Decisions:
    - Visited set is a mutable set owned by LinkWalker, not copied per branch, so two
      siblings that reach the same entity produce one record and one fetch
    - Cache context passed explicitly through the walker; no ambient lookup
    - Walker output is not deduplicated here; result_collector owns the final pass
"""

import logging
from typing import Any

from sideload.core.declarator_registry import DeclaratorRegistry, type_handle_of
from sideload.core.domain_types import (
    CacheKey, CacheOperation, EntityRef, ViewRecord, Whitelist,
)
from sideload.core.entity_identity import (
    extract_identity, is_entity_data, is_id_collection, is_id_scalar,
)
from sideload.core.entity_protocols import EntityDeclarator, RenderCacheLike
from sideload.core.link_filter import filter_links, normalize_link_value

logger = logging.getLogger(__name__)


class LinkWalker:
    """One traversal: registry, cache, context and whitelist fixed; visited set grows."""

    def __init__(
        self,
        registry: DeclaratorRegistry,
        cache: RenderCacheLike,
        context: Any = None,
        whitelist: Whitelist = None,
    ):
        self._registry = registry
        self._cache = cache
        self._context = context
        self._whitelist = whitelist
        self.visited: set[EntityRef] = set()

    # ─── Entry points ────────────────────────────────────────────

    def walk(self, root: Any, type_handle: Any) -> list[ViewRecord]:
        """Link records reachable from root entity-data (single or sequence)."""
        declarator = self._registry.resolve(type_handle)
        if is_id_collection(root):
            records: list[ViewRecord] = []
            for entity in root:
                records.extend(self._walk_entity(declarator, entity))
            return records
        return self._walk_entity(declarator, root)

    def walk_ids(self, type_handle: Any, ids: Any) -> list[ViewRecord]:
        """Link records reachable from entities fetched by id (single or sequence)."""
        declarator = self._registry.resolve(type_handle)
        records: list[ViewRecord] = []
        for entity_id in normalize_link_value(ids):
            ref = EntityRef(declarator.type_name(), entity_id)
            if ref in self.visited:
                continue
            data = self._fetch(declarator, entity_id)
            if data is None:
                continue
            records.extend(self._walk_entity(declarator, data, alias=ref))
        return records

    # ─── Traversal ───────────────────────────────────────────────

    def _walk_entity(
        self, declarator: EntityDeclarator, data: Any, alias: EntityRef | None = None,
    ) -> list[ViewRecord]:
        """Mark `data` (and the ref it was fetched by) visited and walk its links.

        Already visited -> [].
        """
        if not is_entity_data(data):
            return []
        identity = extract_identity(data)
        if identity is None:
            logger.debug(
                "Entity has no identity, skipping links",
                extra={"type_handle": declarator.type_name()},
            )
            return []
        ref = EntityRef(declarator.type_name(), identity)
        if ref in self.visited:
            return []
        self.visited.add(ref)
        if alias is not None:
            self.visited.add(alias)

        records: list[ViewRecord] = []
        for link_key, value in filter_links(declarator.declare_links(data), self._whitelist):
            link_declarator = self._registry.resolve(type_handle_of(link_key))
            for element in normalize_link_value(value):
                records.extend(self._walk_element(link_declarator, element))
        return records

    def _walk_element(self, declarator: EntityDeclarator, element: Any) -> list[ViewRecord]:
        """Record for one linked id or entity-data, followed by its own links."""
        type_handle = declarator.type_name()

        if is_id_scalar(element):
            ref = EntityRef(type_handle, element)
            if ref in self.visited:
                return []
            data = self._fetch(declarator, element)
            if data is None:
                return []
            record = declarator.prepare_for_view(data)
            return [record, *self._walk_entity(declarator, data, alias=ref)]

        identity = extract_identity(element)
        if identity is None or EntityRef(type_handle, identity) in self.visited:
            return []
        record = declarator.prepare_for_view(element)
        return [record, *self._walk_entity(declarator, element)]

    def _fetch(self, declarator: EntityDeclarator, entity_id: Any) -> Any:
        key = CacheKey(declarator.type_name(), CacheOperation.GET, entity_id)
        return self._cache.fetch(
            self._context, key, lambda: declarator.get_by_id(entity_id),
        )


def walk_links(
    root: Any,
    type_handle: Any,
    *,
    registry: DeclaratorRegistry,
    cache: RenderCacheLike,
    context: Any = None,
    whitelist: Whitelist = None,
) -> list[ViewRecord]:
    """Walk links of root entity-data with a fresh visited set."""
    walker = LinkWalker(registry, cache, context, whitelist)
    return walker.walk(root, type_handle)


def walk_links_by_id(
    type_handle: Any,
    ids: Any,
    *,
    registry: DeclaratorRegistry,
    cache: RenderCacheLike,
    context: Any = None,
    whitelist: Whitelist = None,
) -> list[ViewRecord]:
    """Walk links of entities fetched by id with a fresh visited set."""
    walker = LinkWalker(registry, cache, context, whitelist)
    return walker.walk_ids(type_handle, ids)
