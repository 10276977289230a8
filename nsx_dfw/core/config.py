"""
Application configuration settings.

Central configuration module using Pydantic BaseSettings with environment variable support.
Loads from .env file and environment variables.
"""
import json
from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional, Union

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file if it exists (python-dotenv)
env_path = Path(".env")
if env_path.exists():
    load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # App settings
    APP_NAME: str = "NSX DFW Manager"
    APP_ENV: str = Field(default="local")
    DEBUG: bool = Field(default=False)

    # NSX-T manager connection
    NSX_MANAGER_URL: str = Field(
        default="https://localhost",
        description="Base URL of the NSX-T manager (scheme and host, no API path)",
    )
    NSX_USER: Optional[str] = Field(default=None)
    NSX_PASSWORD: Optional[str] = Field(default=None)
    NSX_VERIFY_SSL: bool = Field(default=True)
    NSX_TIMEOUT: int = Field(default=30, description="Per-request timeout in seconds")
    NSX_HTTP_RETRIES: int = Field(
        default=3,
        description="Retries for transient transport failures (connection errors, 502/503/504)",
    )

    # Distributed firewall
    MANAGED_SECTION_NAME: str = Field(
        default="OpenNebula",
        description="Display name of the firewall section owned by this integration",
    )
    CONFLICT_RETRY_ATTEMPTS: int = Field(
        default=3,
        ge=1,
        description="Attempts for a rule write rejected with a stale revision (1 disables retrying)",
    )
    CONFLICT_RETRY_BACKOFF: float = Field(
        default=0.5,
        ge=0,
        description="Exponential backoff multiplier in seconds between conflict retries",
    )
    DUPLICATE_NAME_POLICY: Literal["error", "last"] = Field(
        default="error",
        description="How name lookups treat duplicate display names: raise, or keep the last match",
    )

    # CORS settings
    CORS_ORIGINS: Union[str, List[str]] = Field(
        default='["http://localhost:3000", "http://localhost:8000"]',
    )

    @field_validator("CORS_ORIGINS")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from string or list."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                # If not JSON, treat as comma-separated
                return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("NSX_MANAGER_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # API Authentication
    API_KEY: Optional[str] = Field(
        default=None,
        description="API key for write operations (rule and section changes, cleanup). Leave empty to disable authentication.",
    )

    def has_nsx_credentials(self) -> bool:
        """Check if NSX credentials are configured and not empty."""
        return bool(self.NSX_USER and self.NSX_USER.strip() and self.NSX_PASSWORD)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
