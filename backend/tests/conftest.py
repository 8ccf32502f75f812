"""Root conftest: shared test configuration and fixtures."""

import os

import pytest

from sideload.config import get_settings
from sideload.infrastructure import render_cache as render_cache_module
from sideload.infrastructure.render_cache import RenderCache
from sideload.services.render_views import ViewRenderer
from tests.entity_fixtures import FakeClock, FetchLog, build_blog_registry

# Tests never pick up a developer's .env overrides for caching
os.environ.setdefault("SIDELOAD_CACHE_ENABLED", "true")
os.environ.setdefault("SIDELOAD_CACHE_TTL_MS", "100")


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Each test starts with no process-wide cache and fresh settings."""
    get_settings.cache_clear()
    original = render_cache_module.render_cache
    render_cache_module.render_cache = None
    yield
    render_cache_module.render_cache = original
    get_settings.cache_clear()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return RenderCache(ttl_seconds=0.1, clock=clock)


@pytest.fixture
def fetch_log():
    return FetchLog()


@pytest.fixture
def blog_registry(fetch_log):
    return build_blog_registry(fetch_log)


@pytest.fixture
def renderer(blog_registry, cache):
    return ViewRenderer(blog_registry, cache)
