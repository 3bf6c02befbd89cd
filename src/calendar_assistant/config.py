"""Configuration management for Calendar Assistant.

This module handles application configuration using Pydantic settings.
Configuration can be loaded from environment variables or .env files.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with
    the CAL_ASSIST_ prefix (e.g., CAL_ASSIST_OLLAMA_HOST).
    """

    model_config = SettingsConfigDict(
        env_prefix="CAL_ASSIST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Ollama Configuration
    ollama_host: str = Field(
        default="http://localhost:11434",
        description="Ollama API host URL",
    )
    ollama_model: str = Field(
        default="llama3.1",
        description="Ollama model used to parse event details and time ranges",
    )
    ollama_timeout: int = Field(
        default=30,
        description="Timeout for Ollama API requests in seconds",
    )
    ollama_temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Sampling temperature; kept low so parsing stays consistent",
    )

    # Retry policy for the text generator
    max_retries: int = Field(
        default=3,
        ge=1,
        description="Maximum number of attempts for a text generation request",
    )
    retry_base_delay: float = Field(
        default=1.0,
        ge=0.0,
        description="Initial backoff delay in seconds, doubled after each attempt",
    )
    retry_max_delay: float = Field(
        default=30.0,
        ge=0.0,
        description="Upper bound for a single backoff delay in seconds",
    )
    retry_jitter: float = Field(
        default=0.25,
        ge=0.0,
        le=1.0,
        description="Random jitter added to each delay, as a fraction of the delay",
    )

    # Google Calendar Configuration
    google_credentials_path: Path = Field(
        default=Path("credentials.json"),
        description="Path to Google OAuth client credentials file",
    )
    google_token_path: Path = Field(
        default=Path("token.json"),
        description="Path to the stored Google OAuth token",
    )
    calendar_scope: str = Field(
        default="https://www.googleapis.com/auth/calendar",
        description="OAuth scope used for Google Calendar access",
    )
    calendar_id: str = Field(
        default="primary",
        description="Google Calendar ID to read from and write to",
    )
    timezone: str = Field(
        default="America/Los_Angeles",
        description="IANA timezone used to interpret dates and times",
    )
    query_max_results: int = Field(
        default=10,
        ge=1,
        description="Maximum number of events listed for a schedule query",
    )
    week_max_results: int = Field(
        default=50,
        ge=1,
        description="Maximum number of events listed for the /week command",
    )

    # Conversation Configuration
    pending_ttl_seconds: int = Field(
        default=600,
        ge=1,
        description="Seconds an unconfirmed event draft stays valid",
    )
    allowed_user_id: str | None = Field(
        default=None,
        description="If set, only this chat user may talk to the assistant",
    )

    # Application Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()
