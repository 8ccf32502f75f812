"""Settings: defaults, SIDELOAD_* environment overrides, validation."""

import pytest
from pydantic import ValidationError

from sideload.config import Settings, get_settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("SIDELOAD_CACHE_ENABLED", raising=False)
    monkeypatch.delenv("SIDELOAD_CACHE_TTL_MS", raising=False)
    settings = Settings(_env_file=None)
    assert settings.cache_enabled is True
    assert settings.cache_ttl_ms == 100
    assert settings.log_format == "json"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SIDELOAD_CACHE_ENABLED", "false")
    monkeypatch.setenv("SIDELOAD_CACHE_TTL_MS", "250")
    settings = Settings(_env_file=None)
    assert settings.cache_enabled is False
    assert settings.cache_ttl_ms == 250


def test_ttl_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(cache_ttl_ms=0)


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
