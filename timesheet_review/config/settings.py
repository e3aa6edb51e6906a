"""
Configuration management for the review core.
"""

from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ReviewSystemConfig(BaseSettings):
    """Configuration settings for the review core."""

    # Timesheet API
    api_base_url: str = Field(alias="API_BASE_URL")
    api_token: Optional[str] = Field(default=None, alias="API_TOKEN")
    request_timeout: float = Field(default=10.0, alias="REQUEST_TIMEOUT")

    # Session actor
    actor_id: Optional[str] = Field(default=None, alias="ACTOR_ID")
    actor_role: Optional[str] = Field(default=None, alias="ACTOR_ROLE")

    # Application
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Processing
    bulk_max_workers: int = Field(default=8, ge=1, le=64, alias="BULK_MAX_WORKERS")
    max_retries: int = Field(default=3, ge=0, alias="MAX_RETRIES")
    retry_delay: float = Field(default=1.0, ge=0, alias="RETRY_DELAY")

    # Read cache
    cache_ttl_seconds: float = Field(default=60.0, ge=0, alias="CACHE_TTL_SECONDS")
    cache_max_size: int = Field(default=256, ge=0, alias="CACHE_MAX_SIZE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    @field_validator("api_base_url")
    @classmethod
    def validate_base_url(cls, v):
        """Ensure the API base URL is an http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("API base URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Ensure environment is valid."""
        valid_envs = ["development", "testing", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Environment must be one of: {valid_envs}")
        return v.lower()


def load_config(env_file: Optional[str] = None) -> ReviewSystemConfig:
    """Load configuration from environment variables and .env file."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    return ReviewSystemConfig()


# Global configuration instance
_config: Optional[ReviewSystemConfig] = None


def get_config() -> ReviewSystemConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(env_file: Optional[str] = None) -> ReviewSystemConfig:
    """Reload configuration (useful for testing)."""
    global _config
    _config = load_config(env_file)
    return _config
