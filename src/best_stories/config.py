"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    best_stories_url: str = "https://hacker-news.firebaseio.com/v0/beststories.json"
    item_details_url_template: str = (
        "https://hacker-news.firebaseio.com/v0/item/{item_id}.json"
    )
    max_concurrent_requests: int = Field(default=5, gt=0)
    story_ids_cache_minutes: float = Field(default=5, gt=0)
    story_details_cache_minutes: float = Field(default=60, gt=0)
    full_result_cache_minutes: float = Field(default=2, gt=0)
    request_timeout_seconds: float = Field(default=10, gt=0)
    retry_attempts: int = Field(default=3, ge=0)
    retry_backoff_base_seconds: float = Field(default=2, gt=0)
    circuit_breaker_failure_threshold: int = Field(default=5, gt=0)
    circuit_breaker_window_seconds: float = Field(default=30, gt=0)
    circuit_breaker_break_seconds: float = Field(default=30, gt=0)
    max_story_count: int = Field(default=500, gt=0)
    default_story_count: int = Field(default=10, gt=0)
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def item_details_url(self, item_id: int) -> str:
        """Return the detail URL for a single item."""
        return self.item_details_url_template.format(item_id=item_id)
