"""
Application configuration using Pydantic Settings.
Loads from environment variables and .env file.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OpenAI / LLM
    openai_api_key: SecretStr = Field(default=SecretStr(""))
    openai_model: str = Field(default="gpt-4o-mini")
    openai_base_url: Optional[str] = Field(
        default=None, description="Override for OpenAI-compatible endpoints"
    )
    openai_timeout_seconds: Optional[float] = Field(
        default=None, description="Request timeout; unset means no timeout"
    )

    # Extraction settings
    extraction_cache_ttl_seconds: float = Field(
        default=3600, description="How long extracted document text is reused"
    )

    # Scoring settings
    scoring_batch_size: int = Field(
        default=5, description="Candidates scored concurrently per batch"
    )
    skill_list_limit: int = Field(
        default=20, description="Max entries kept in matched/missing skill lists"
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
