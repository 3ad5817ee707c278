"""Application configuration using Pydantic settings."""

from functools import lru_cache
from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central application configuration."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    app_name: str = "Critical CSS Service"
    environment: str = "development"
    debug: bool = False
    port: int = 3000

    git_sha: str = Field(default="unknown", validation_alias=AliasChoices("app_git_sha", "git_sha"))

    cors_allowed_origins: List[str] = ["*"]

    # Optional shared secret; when empty every request is accepted.
    api_token: str = Field(default="", validation_alias=AliasChoices("criticalcss_token", "api_token"))
    auth_token_header: str = "Authorization"

    cache_max_items: int = 200
    cache_ttl_seconds: float = 60 * 30
    response_max_age_seconds: int = 600

    playwright_timeout_seconds: int = 60
    playwright_headless: bool = True
    selector_wait_timeout_ms: int = 12_000


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


settings = get_settings()
