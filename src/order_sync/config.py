"""Order sync service configuration."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Environment-driven settings for the order sync service."""

    # Downstream order metafield backend
    metafield_api_base: str = "https://highquality.allgovjobs.com/backend"
    forward_timeout: float = 15.0

    # Shopify app credentials (webhook HMAC + app proxy signature)
    shopify_api_secret: str = ""
    shopify_api_version: str = "2025-01"

    # Offline Admin API tokens: single-shop fallback, or a JSON map shop -> token
    shopify_access_token: str = ""
    shopify_access_tokens: dict[str, str] = {}
    admin_query_timeout: float = 30.0
    admin_query_retries: int = Field(default=2, ge=0)

    # Shopify Flow shared secret (empty = check skipped)
    flow_webhook_secret: str = ""

    # Bearer token for the admin passthrough routes (empty = routes locked)
    admin_api_token: str = ""

    app_proxy_path: str = "/apps/proxy"
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
