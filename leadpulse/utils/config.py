"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.
"""

from typing import Optional
from functools import lru_cache
from urllib.parse import quote

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Airtable (record store)
    AIRTABLE_TOKEN: str = ""
    AIRTABLE_BASE_ID: str = "appKbfE8na15iM6EZ"
    AIRTABLE_TABLE_NAME: str = "Outbound Leads"
    AIRTABLE_API_URL: str = "https://api.airtable.com/v0"

    # Claude API (optional - enables narrative call analysis)
    ANTHROPIC_API_KEY: Optional[str] = None
    CLAUDE_MODEL: str = "claude-haiku-4-5-20251001"
    NARRATIVE_MAX_TOKENS: int = 4000

    # Application Settings
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    DISPLAY_TIMEZONE: str = "UTC"

    # Cache behaviour
    CACHE_TTL_SECONDS: float = 20.0
    REFRESH_INTERVAL_SECONDS: float = 30.0
    PROBE_TIMEOUT_SECONDS: float = 5.0

    # Upstream paging / timeouts
    UPSTREAM_PAGE_SIZE: int = 100
    UPSTREAM_TIMEOUT: float = 30.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra fields in .env file
        case_sensitive = False  # Allow both UPPERCASE and lowercase

    @property
    def table_url(self) -> str:
        """Full URL of the leads table endpoint."""
        return f"{self.AIRTABLE_API_URL}/{self.AIRTABLE_BASE_ID}/{quote(self.AIRTABLE_TABLE_NAME)}"

    @property
    def narrative_enabled(self) -> bool:
        return bool(self.ANTHROPIC_API_KEY)


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()
