"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    openai_api_key: str
    openai_vision_model: str = "gpt-5.2"
    openai_reasoning_effort: str = "low"
    openai_store: bool = False
    openai_image_model: str = "gpt-image-1"
    local_store_path: str = ".snap_merch"
    local_store_capacity_bytes: int = 5_000_000
    generation_concurrency: int = 2
    generation_stagger_seconds: float = 0.5
    initial_batch_size: int = 4
    more_batch_size: int = 4
    sync_queue_size: int = 32
    sync_retry_attempts: int = 2
    sync_retry_delay_seconds: float = 1.0
    tracker_url: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
