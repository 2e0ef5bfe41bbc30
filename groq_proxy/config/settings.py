"""
Application configuration and settings.
Centralized configuration management using Pydantic Settings.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from groq_proxy.utils.constants import DEFAULTS, SERVICE_CONFIG

LOG_LEVELS = ("critical", "error", "warning", "info", "debug")
LOG_LEVEL_ALIASES = {"warn": "warning", "fatal": "critical"}


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Extra variables in .env files belong to other tooling (uvicorn, docker, etc.)
    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
        env_file=[".env", ".env.local"],  # .env.local overrides .env
        frozen=True,
    )

    # Application settings
    app_name: str = "Groq API Proxy"
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = DEFAULTS["PORT"]

    # Groq settings
    groq_api_key: Optional[str] = None
    groq_base_url: str = "https://api.groq.com/openai/v1"
    groq_timeout_seconds: float = 60.0
    default_model: str = DEFAULTS["MODEL"]
    default_temperature: float = DEFAULTS["TEMPERATURE"]
    default_top_p: float = DEFAULTS["TOP_P"]

    # CORS settings (comma separated, production only)
    allowed_origins: Optional[str] = None

    # Logging settings
    log_level: str = DEFAULTS["LOG_LEVEL"]
    log_dir: str = SERVICE_CONFIG["LOG_DIR"]
    log_max_bytes: int = SERVICE_CONFIG["LOG_MAX_BYTES"]
    log_backup_count: int = SERVICE_CONFIG["LOG_BACKUP_COUNT"]

    # Static assets
    static_dir: str = "public"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the level name to one both logging and uvicorn accept."""
        level = v.strip().lower()
        level = LOG_LEVEL_ALIASES.get(level, level)
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")
        return level

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Anything that is not production gets verbose error output."""
        return not self.is_production

    @property
    def is_test(self) -> bool:
        return self.environment == "test"

    @property
    def allowed_origin_list(self) -> Optional[List[str]]:
        if not self.allowed_origins:
            return None
        origins = [origin.strip() for origin in self.allowed_origins.split(",")]
        return [origin for origin in origins if origin] or None

    def validate_required(self) -> None:
        """
        Ensure required settings are present.

        Raises:
            ConfigurationError: If the Groq API key is missing
        """
        errors = []
        if not self.groq_api_key:
            errors.append("GROQ_API_KEY environment variable is required")

        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(errors)
            )


def load_config(**overrides) -> Settings:
    """
    Build a settings snapshot from the environment.

    Validation of required values is skipped in the test environment so
    the app can run against a stubbed upstream client.
    """
    try:
        settings = Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed:\n{e}") from e
    if not settings.is_test:
        settings.validate_required()
    return settings


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return load_config()
