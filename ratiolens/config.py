"""
Application configuration using pydantic-settings.

Loads configuration from environment variables with sensible defaults.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"
    app_version: str = "1.0.0"

    # Uploads
    max_upload_size_mb: int = 10

    # CORS
    cors_origins: List[str] = ["*"]

    # LLM enrichment (advisory, always has an offline fallback)
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    industry_lookup_timeout_seconds: float = 10.0
    report_timeout_seconds: float = 30.0
    enable_llm_report: bool = True
    industry_cache_size: int = 1024

    # In-process analysis store (oldest entries evicted first)
    analysis_store_max_items: int = 500

    # Error tracking
    sentry_dsn: Optional[str] = None
    sentry_traces_sample_rate: float = 0.1

    @property
    def max_upload_size_bytes(self) -> int:
        """Get maximum upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def llm_configured(self) -> bool:
        """Whether an OpenAI API key is available."""
        return bool(self.openai_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
