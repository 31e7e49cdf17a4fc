"""Application configuration."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from new_papers.constants import (
    DEFAULT_LOOKBACK_DAYS,
    DEFAULT_MAX_RESULTS,
    DEFAULT_TERMS_FILE,
    DEFAULT_TIMEOUT,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="NEW_PAPERS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # API Keys
    ncbi_api_key: str = ""

    # PubMed query
    lookback_days: int = DEFAULT_LOOKBACK_DAYS
    max_results: int = DEFAULT_MAX_RESULTS
    request_timeout: float = DEFAULT_TIMEOUT

    # Storage
    terms_file: Path = DEFAULT_TERMS_FILE
    vocabulary_file: Path | None = None  # None -> bundled MeSH vocabulary

    # App Settings
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
