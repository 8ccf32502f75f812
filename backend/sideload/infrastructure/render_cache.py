"""Render Cache: request-scoped, time-bounded memoization of entity fetches.

Invariants:
    - Each CacheContext is an isolated scope; nothing is shared across renders
    - TTL is measured from context creation (not sliding); after it, every fetch is a miss
    - fetch(None, ...) and fetch while disabled always call the producer
    - The producer runs at most once per (context, key) within the TTL, even under races
    - Backend faults are logged and treated as a miss; they never reach the caller
    - Producer exceptions propagate unchanged and nothing is stored for that key
    - clear() is idempotent and drops the per-key locks along with the stored entries

Design Decisions:
    - CacheBackend Protocol: in-memory backend by default, swappable for tests and fault injection
    - None results are cached like any other value (found flag, not value sentinel)
    - Per-key RLock held while the producer runs: single-flight per key; re-entrant so
      a producer that fetches the same key again in the same thread does not deadlock
    - Injected monotonic clock: TTL tests advance time instead of sleeping
    - Singleton render_cache initialized on startup via init_render_cache (no import side effects)
"""

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Protocol, TypeVar

from sideload.config import Settings, get_settings
from sideload.infrastructure.observability import render_extra

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 0.1


@dataclass
class CacheContext:
    """Opaque handle for one render's memoization scope."""
    context_id: str
    created_at: float
    expires_at: float
    _guard: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)
    _key_locks: dict = field(default_factory=dict, repr=False, compare=False)

    def key_lock(self, key: Hashable) -> threading.RLock:
        with self._guard:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.RLock()
            return lock

    def release_locks(self) -> None:
        with self._guard:
            self._key_locks.clear()


class CacheBackend(Protocol):
    """Storage of per-context scopes. Implementations may raise CacheBackendError."""
    def open_scope(self, scope_id: str, expires_at: float) -> None: ...
    def read(self, scope_id: str, key: Hashable) -> tuple[bool, Any]: ...
    def write(self, scope_id: str, key: Hashable, value: Any) -> None: ...
    def drop_scope(self, scope_id: str) -> None: ...


class InMemoryCacheBackend:
    """Process-local backend: scope_id -> (expires_at, entries)."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._scopes: dict[str, tuple[float, dict]] = {}
        self._lock = threading.Lock()

    def open_scope(self, scope_id: str, expires_at: float) -> None:
        with self._lock:
            self._purge_expired()
            self._scopes[scope_id] = (expires_at, {})

    def read(self, scope_id: str, key: Hashable) -> tuple[bool, Any]:
        entries = self._live_entries(scope_id)
        if entries is None or key not in entries:
            return False, None
        return True, entries[key]

    def write(self, scope_id: str, key: Hashable, value: Any) -> None:
        entries = self._live_entries(scope_id)
        if entries is not None:
            entries[key] = value

    def drop_scope(self, scope_id: str) -> None:
        with self._lock:
            self._scopes.pop(scope_id, None)

    def __len__(self) -> int:
        return len(self._scopes)

    def _live_entries(self, scope_id: str) -> dict | None:
        with self._lock:
            scope = self._scopes.get(scope_id)
            if scope is None:
                return None
            expires_at, entries = scope
            if self._clock() >= expires_at:
                del self._scopes[scope_id]
                return None
            return entries

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [sid for sid, (exp, _) in self._scopes.items() if now >= exp]
        for sid in expired:
            del self._scopes[sid]


class RenderCache:
    """Creates cache contexts and memoizes fetches inside them."""

    def __init__(
        self,
        backend: CacheBackend | None = None,
        *,
        enabled: bool = True,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.enabled = enabled
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._backend = backend if backend is not None else InMemoryCacheBackend(clock)

    def create_context(self) -> CacheContext | None:
        """New memoization scope with TTL starting now; None when caching is disabled."""
        if not self.enabled:
            return None
        now = self._clock()
        context = CacheContext(
            context_id=uuid.uuid4().hex,
            created_at=now,
            expires_at=now + self.ttl_seconds,
        )
        try:
            self._backend.open_scope(context.context_id, context.expires_at)
        except Exception as e:
            logger.warning(
                f"Cache backend open_scope failed: {e}",
                extra=render_extra(context, cache_event="backend_error"),
            )
        logger.debug(
            "Cache context created",
            extra=render_extra(context, cache_event="context_created"),
        )
        return context

    def fetch(self, context: CacheContext | None, key: Hashable, producer: Callable[[], T]) -> T:
        """Memoized producer() for key within context."""
        if context is None or not self.enabled:
            return producer()
        if self._clock() >= context.expires_at:
            return producer()

        with context.key_lock(key):
            hit, value = self._read(context, key)
            if hit:
                return value
            value = producer()
            self._write(context, key, value)
            return value

    def clear(self, context: CacheContext | None) -> None:
        """Release a context eagerly. Safe to call more than once."""
        if context is None:
            return
        context.release_locks()
        try:
            self._backend.drop_scope(context.context_id)
        except Exception as e:
            logger.warning(
                f"Cache backend drop_scope failed: {e}",
                extra=render_extra(context, cache_event="backend_error"),
            )
        logger.debug(
            "Cache context cleared",
            extra=render_extra(context, cache_event="context_cleared"),
        )

    def _read(self, context: CacheContext, key: Hashable) -> tuple[bool, Any]:
        try:
            return self._backend.read(context.context_id, key)
        except Exception as e:
            logger.warning(
                f"Cache backend read failed, treating as miss: {e}",
                extra=render_extra(context, cache_event="backend_error"),
            )
            return False, None

    def _write(self, context: CacheContext, key: Hashable, value: Any) -> None:
        try:
            self._backend.write(context.context_id, key, value)
        except Exception as e:
            logger.warning(
                f"Cache backend write failed: {e}",
                extra=render_extra(context, cache_event="backend_error"),
            )


# Singleton (initialized on startup)
render_cache: RenderCache | None = None


def init_render_cache(settings: Settings, **kwargs) -> RenderCache:
    global render_cache
    render_cache = RenderCache(
        enabled=settings.cache_enabled,
        ttl_seconds=settings.cache_ttl_ms / 1000,
        **kwargs,
    )
    return render_cache


def get_render_cache() -> RenderCache:
    """Process-wide RenderCache, initialized from settings on first use."""
    if render_cache is None:
        return init_render_cache(get_settings())
    return render_cache
