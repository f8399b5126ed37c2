"""
Configuration module using pydantic-settings.
Loads environment variables from .env file.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Judgment provider
    provider: Literal["openai", "gemini"] = Field(
        default="openai",
        description="Which language-model provider scores reviews",
    )
    openai_api_key: str | None = Field(default=None, description="OpenAI API Key")
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model used for review judgments",
    )
    gemini_api_key: str | None = Field(default=None, description="Gemini API Key")
    gemini_model: str = Field(
        default="gemini-1.5-flash-latest",
        description="Gemini model used for review judgments",
    )
    gemini_endpoint: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/models",
        description="Base URL of the Gemini generateContent API",
    )

    # Scoring
    max_text_length: int = Field(
        default=15000,
        description="Review text is truncated to this many characters",
    )
    provider_timeout: float = Field(
        default=30.0,
        description="Ceiling in seconds for a single provider call",
    )
    min_review_length: int = Field(
        default=10,
        description="Reviews with this many characters or fewer are skipped",
    )

    # Page gating
    target_host_fragment: str = Field(
        default="amazon.",
        description="Analysis only runs on hosts containing this fragment",
    )

    # Persistence
    db_path: Path = Field(
        default=Path("./data/trustlens.db"),
        description="SQLite file holding the latest analysis",
    )

    # Logging Configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file name (file logging is off when unset)",
    )
    log_dir: Path = Field(
        default=Path("logs"),
        description="Directory holding the log file",
    )

    # Crawler Configuration
    crawler_timeout: int = Field(
        default=30000,
        description="Crawler timeout in milliseconds",
    )
    crawler_max_retries: int = Field(
        default=3,
        description="Maximum number of crawler retries",
    )
    page_settle_delay: float = Field(
        default=3.0,
        description="Seconds to wait after page load before analysing",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


class _SettingsProxy:
    """
    Lazy proxy for settings.
    Only loads settings when accessed, allowing import without .env file.
    """

    _settings: Settings | None = None

    def __getattr__(self, name: str):
        if self._settings is None:
            self._settings = get_settings()
        return getattr(self._settings, name)


# Convenience instance (lazy loaded)
settings = _SettingsProxy()
