"""View Renderer: render entry points that own the cache context of one render.

Invariants:
    - A render with no caller-supplied context creates one and ALWAYS clears it (try/finally)
    - A caller-supplied context is reused as-is and never cleared here
    - One LinkWalker (one visited set) per render, shared by every root entity
    - links pass through collect_records with the same whitelist used by the walker
    - Declarator exceptions propagate unchanged after being logged

Design Decisions:
    - Explicit context argument for nested renders instead of a thread-local lookup
    - Returns pydantic SingleRender / ManyRender so the host serializer gets a stable shape
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterable, Iterator

from sideload.core.declarator_registry import DeclaratorRegistry
from sideload.core.domain_types import ViewRecord, Whitelist
from sideload.core.link_filter import normalize_whitelist
from sideload.core.link_walker import LinkWalker
from sideload.core.result_collector import collect_records
from sideload.infrastructure.observability import render_extra
from sideload.infrastructure.render_cache import CacheContext, RenderCache, get_render_cache
from sideload.schemas.render import ManyRender, SingleRender

logger = logging.getLogger(__name__)


class ViewRenderer:
    """Renders root entities and their side-loaded links."""

    def __init__(self, registry: DeclaratorRegistry, cache: RenderCache | None = None):
        self.registry = registry
        self._cache = cache

    @property
    def cache(self) -> RenderCache:
        return self._cache if self._cache is not None else get_render_cache()

    def resolve_single(
        self,
        type_handle: Any,
        entity: Any,
        include: Iterable[Any] | None = None,
        context: CacheContext | None = None,
    ) -> SingleRender:
        declarator = self.registry.resolve(type_handle)
        whitelist = normalize_whitelist(include)
        with self._render_context(context) as ctx:
            result = declarator.prepare_for_view(entity)
            links = self._walk(ctx, whitelist, type_handle, lambda w: w.walk(entity, type_handle))
        return SingleRender.model_validate({
            "result": result.to_dict(), "links": [r.to_dict() for r in links],
        })

    def resolve_many(
        self,
        type_handle: Any,
        entities: Iterable[Any],
        include: Iterable[Any] | None = None,
        context: CacheContext | None = None,
    ) -> ManyRender:
        declarator = self.registry.resolve(type_handle)
        whitelist = normalize_whitelist(include)
        entities = list(entities)
        with self._render_context(context) as ctx:
            results = [declarator.prepare_for_view(e) for e in entities]
            links = self._walk(ctx, whitelist, type_handle, lambda w: w.walk(entities, type_handle))
        return ManyRender.model_validate({
            "result": [r.to_dict() for r in results],
            "links": [r.to_dict() for r in links],
        })

    def resolve_links_by_id(
        self,
        type_handle: Any,
        ids: Any,
        include: Iterable[Any] | None = None,
        context: CacheContext | None = None,
    ) -> list[ViewRecord]:
        """Side-loaded links of entities given only by id."""
        self.registry.resolve(type_handle)
        whitelist = normalize_whitelist(include)
        with self._render_context(context) as ctx:
            return self._walk(ctx, whitelist, type_handle, lambda w: w.walk_ids(type_handle, ids))

    # ─── Helpers ─────────────────────────────────────────────────

    @contextmanager
    def _render_context(self, context: CacheContext | None) -> Iterator[CacheContext | None]:
        if context is not None:
            yield context
            return
        owned = self.cache.create_context()
        try:
            yield owned
        finally:
            self.cache.clear(owned)

    def _walk(self, ctx, whitelist: Whitelist, type_handle: Any, run) -> list[ViewRecord]:
        walker = LinkWalker(self.registry, self.cache, ctx, whitelist)
        try:
            links = collect_records(run(walker), whitelist)
        except Exception:
            logger.error(
                "Link resolution failed",
                extra=render_extra(ctx, type_handle=type_handle),
                exc_info=True,
            )
            raise
        logger.debug(
            "Rendered links",
            extra=render_extra(ctx, type_handle=type_handle, link_count=len(links)),
        )
        return links
