"""
unified_api_client.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for the client.
- Offer a cached settings instance for hosts that do not build their own.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    One settings object is handed to `APIBase` and shared by every component.
    """

    model_config = SettingsConfigDict(env_prefix="UAC_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "unified-api-client"
    log_level: str = "INFO"

    # Remote API root; request paths are appended verbatim.
    api_base: str = "http://localhost:8080"
    graphql_path: str = "/graphql"
    analytics_path: str = "/analytics"

    # Unified Auth login page. Its origin hosts /impersonate and /mayImpersonate.
    auth_redirect: str = "http://localhost:3000/login"

    # Analytics batching
    analytics_window_ms: int = Field(default=2000, ge=0)
    navigation_debounce_ms: int = Field(default=10, ge=0)

    # None keeps authorization answers for the life of the client.
    authz_cache_ttl_seconds: float | None = None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Tests construct `Settings(...)` directly instead of going through the cache.
