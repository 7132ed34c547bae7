"""Tests for settings and dependency wiring."""

from gallery_layout.api.config import Settings
from gallery_layout.api.dependencies import build_handler
from gallery_layout.db.cache import InMemoryCache


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        for name in ("CACHE_BACKEND", "MAX_WIDE_STREAK", "BALANCE_WIDE"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings()

        assert settings.cache_backend == "memory"
        assert settings.uses_redis is False
        assert settings.max_wide_streak == 1
        assert settings.balance_wide is True

    def test_redis_backend(self, monkeypatch):
        monkeypatch.setenv("CACHE_BACKEND", "Redis")
        assert Settings().uses_redis is True

    def test_unknown_backend_uses_memory(self, monkeypatch):
        monkeypatch.setenv("CACHE_BACKEND", "memcached")
        settings = Settings()

        handler = build_handler(settings)

        assert settings.uses_redis is False
        assert isinstance(handler.cache._storage, InMemoryCache)

    def test_handler_follows_settings(self, monkeypatch):
        monkeypatch.setenv("CACHE_BACKEND", "memory")
        monkeypatch.setenv("MAX_WIDE_STREAK", "2")
        monkeypatch.setenv("BALANCE_WIDE", "false")
        monkeypatch.setenv("STRICT_DIMENSIONS", "true")

        handler = build_handler(Settings())

        assert handler.orderer.max_wide_streak == 2
        assert handler.orderer.balance_wide is False
        assert handler.placer.strict is True
