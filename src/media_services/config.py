"""
Configuration settings for the Media Services client.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "Media Services Client"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === Retry & Backoff ===
    CONNECTION_RETRY_MAX_ATTEMPTS: int = Field(default=4, ge=0)  # Retries after the first attempt
    CONNECTION_RETRY_SLEEP_QUANTUM_MS: int = Field(default=100, ge=0)  # Min backoff and delta
    RETRY_MAX_BACKOFF_MULTIPLIER: int = Field(default=16, ge=1)  # Max backoff = quantum * multiplier
    RETRY_JITTER: float = Field(default=0.0, ge=0.0, lt=1.0)  # 0 keeps delays deterministic

    # === Web Requests ===
    WEB_REQUEST_TIMEOUT: float = Field(default=30.0, gt=0)  # seconds

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


# Global settings instance
settings = Settings()
