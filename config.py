"""
Centralized configuration for Link Traffic Analyzer
All environment variables and settings are defined here
"""

from dataclasses import dataclass
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Provides centralized configuration with validation and defaults.
    """

    # ======================
    # Cloudflare Configuration
    # ======================
    CLOUDFLARE_API_TOKEN: str = Field(
        default="",
        description="Cloudflare API token (Radar ranking + URL Scanner)"
    )
    CLOUDFLARE_ACCOUNT_ID: str = Field(
        default="",
        description="Cloudflare account ID that owns URL Scanner scans"
    )
    CLOUDFLARE_API_BASE: str = Field(
        default="https://api.cloudflare.com/client/v4",
        description="Cloudflare API base URL"
    )
    HTTP_TIMEOUT: float = Field(
        default=15.0,
        description="Timeout in seconds for Cloudflare API requests"
    )

    # ======================
    # Page Content Configuration
    # ======================
    CONTENT_FETCH_TIMEOUT: float = Field(
        default=10.0,
        description="Timeout in seconds when downloading page HTML for sentiment"
    )
    CONTENT_MAX_CHARS: int = Field(
        default=100_000,
        description="Maximum characters of page text passed to the sentiment scorer"
    )

    # ======================
    # Screenshot Configuration
    # ======================
    SCAN_POLL_INTERVAL: float = Field(
        default=2.0,
        description="Seconds between URL Scanner status polls"
    )
    SCAN_POLL_TIMEOUT: float = Field(
        default=30.0,
        description="Max seconds to wait for a new scan before assuming it is ready"
    )
    SCAN_REUSE_WINDOW: int = Field(
        default=86400,  # 24 hours
        description="Existing scans younger than this (seconds) are reused"
    )
    SCREENSHOT_CACHE_MAX_AGE: int = Field(
        default=86400,  # 24 hours
        description="Cache-Control max-age for proxied screenshots"
    )
    MAX_SCREENSHOT_DIMENSION: int = Field(
        default=1600,
        description="Maximum screenshot dimension in pixels when embedding in PDFs"
    )

    # ======================
    # Logging Configuration
    # ======================
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )

    @property
    def credentials(self) -> "ProviderCredentials":
        """Cloudflare credentials as an explicit context object"""
        return ProviderCredentials(
            api_token=self.CLOUDFLARE_API_TOKEN,
            account_id=self.CLOUDFLARE_ACCOUNT_ID,
            api_base=self.CLOUDFLARE_API_BASE.rstrip("/"),
            timeout=self.HTTP_TIMEOUT,
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"  # Allow extra env vars in .env file


@dataclass(frozen=True)
class ProviderCredentials:
    """Credentials and endpoint details handed to the Cloudflare clients."""

    api_token: str = ""
    account_id: str = ""
    api_base: str = "https://api.cloudflare.com/client/v4"
    timeout: float = 15.0

    @property
    def has_token(self) -> bool:
        return bool(self.api_token)

    @property
    def can_scan(self) -> bool:
        """URL Scanner calls are scoped to an account, so both values are needed"""
        return bool(self.api_token and self.account_id)


# Global settings instance
settings = Settings()


# ======================
# Convenience Functions
# ======================

def get_settings() -> Settings:
    """
    Read settings from the environment at call time.

    Used as a FastAPI dependency so each request sees the current credentials.
    """
    return Settings()


def get_log_level() -> str:
    """Get logging level name"""
    return settings.LOG_LEVEL.upper()
