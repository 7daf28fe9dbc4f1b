"""Application settings loaded from the environment (or a .env file)."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite+aiosqlite:///./fundscope_cache.db"
    api_base_url: str = "http://localhost:8000"
    log_level: str = "INFO"

    cache_ttl_hours: float = 24.0
    provider_timeout_seconds: float = 10.0
    enrich_chunk_size: int = 5
    enrich_pacing_seconds: float = 0.2
    ratio_batch_limit: int = 10
    aggregate_concurrency: int = 4


@lru_cache
def get_settings() -> Settings:
    return Settings()
