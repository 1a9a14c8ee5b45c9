"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from nostrcache.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("REDIS_URL", raising=False)
        monkeypatch.delenv("NOSTRCACHE_REDIS_URL", raising=False)
        settings = Settings(_env_file=None)
        assert settings.cache_ttl == 3600
        assert settings.relay_list_ttl is None
        assert settings.key_prefix == "nostr"
        assert settings.redis_url == "redis://localhost:6379/0"

    def test_prefixed_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NOSTRCACHE_CACHE_TTL", "60")
        monkeypatch.setenv("NOSTRCACHE_RELAY_LIST_TTL", "86400")
        settings = Settings(_env_file=None)
        assert settings.cache_ttl == 60
        assert settings.relay_list_ttl == 86400

    def test_plain_redis_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NOSTRCACHE_REDIS_URL", raising=False)
        monkeypatch.setenv("REDIS_URL", "redis://cache:6379/2")
        assert Settings(_env_file=None).redis_url == "redis://cache:6379/2"

    def test_keyword_override(self) -> None:
        assert Settings(_env_file=None, redis_url="redis://x:1/0").redis_url == "redis://x:1/0"

    def test_ttl_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, cache_ttl=0)
