from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="NOSTRCACHE_", env_file=".env", extra="ignore")

    app_name: str = "nostrcache"

    # Redis
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        validation_alias=AliasChoices("redis_url", "NOSTRCACHE_REDIS_URL", "REDIS_URL"),
    )
    key_prefix: str = "nostr"

    # Expiry window (seconds) shared by primary entries and the author/kind index
    cache_ttl: int = Field(default=3600, gt=0)
    # Relay list sets are kept forever unless this is set
    relay_list_ttl: int | None = Field(default=None, gt=0)

    # Observability
    enable_metrics: bool = True
    log_level: str = "INFO"
    log_json: bool = True


settings = Settings()
