"""
Application configuration management using Pydantic Settings.

Loads configuration from environment variables and .env files.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Application Settings
    # ==========================================================================
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Emit JSON formatted logs")

    app_name: str = Field(default="MessMass", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept log levels in any case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    # ==========================================================================
    # Variables Registry
    # ==========================================================================
    variables_api_url: str = Field(
        default="http://localhost:3000/api/variables-config",
        description="Endpoint serving the variables metadata catalogue",
    )
    variables_cache_ttl: int = Field(
        default=300, description="Variables cache TTL in seconds"
    )
    variables_request_timeout: float = Field(
        default=10.0, description="Timeout for variables API requests in seconds"
    )

    # ==========================================================================
    # Formula Engine
    # ==========================================================================
    formula_cache_size: int = Field(
        default=1024, description="Number of parsed formulas kept in memory"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Global settings instance
settings = get_settings()
